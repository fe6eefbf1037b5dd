"""CYAI Threat Platform Core Modules"""

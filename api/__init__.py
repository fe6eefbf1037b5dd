"""CYAI Threat Platform API"""

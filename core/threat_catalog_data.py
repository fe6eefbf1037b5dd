"""
CYAI Threat Catalog Data
Contains the hardcoded lookup tables behind detections, explanations and reports.
"""

THREAT_CATEGORIES = [
    {
        "id": "network_intrusion",
        "name": "Network Intrusions",
        "description": "Unauthorized access attempts and lateral movement within networks",
        "icon": "Network",
        "severity": "high",
        "color": "text-destructive",
        "examples": ["Port scanning", "Lateral movement", "Privilege escalation", "Command injection"]
    },
    {
        "id": "malware_ransomware",
        "name": "Malware & Ransomware",
        "description": "Malicious software attempting to infect systems or encrypt data",
        "icon": "Bug",
        "severity": "critical",
        "color": "text-destructive",
        "examples": ["File encryption", "System modification", "Process injection", "Registry changes"]
    },
    {
        "id": "phishing_social",
        "name": "Phishing & Social Engineering",
        "description": "Attempts to trick users into revealing credentials or installing malware",
        "icon": "Mail",
        "severity": "medium",
        "color": "text-warning",
        "examples": ["Credential harvesting", "Fake attachments", "Domain spoofing", "CEO fraud"]
    },
    {
        "id": "insider_threats",
        "name": "Insider Threats",
        "description": "Malicious or careless actions by trusted users within the organization",
        "icon": "UserX",
        "severity": "high",
        "color": "text-neon-orange",
        "examples": ["Data theft", "Privilege abuse", "After-hours access", "Unusual file access"]
    },
    {
        "id": "zero_day_apt",
        "name": "Zero-Day & APTs",
        "description": "Advanced persistent threats exploiting unknown vulnerabilities",
        "icon": "Zap",
        "severity": "critical",
        "color": "text-destructive",
        "examples": ["Unknown exploits", "Persistent backdoors", "Steganography", "Living-off-the-land"]
    },
    {
        "id": "data_exfiltration",
        "name": "Data Exfiltration",
        "description": "Unauthorized transfer of sensitive data outside the organization",
        "icon": "Download",
        "severity": "critical",
        "color": "text-destructive",
        "examples": ["Large file transfers", "Unusual upload patterns", "DNS tunneling", "Cloud storage abuse"]
    },
    {
        "id": "ddos_attacks",
        "name": "DoS/DDoS Attacks",
        "description": "Attempts to overwhelm network resources and disrupt service availability",
        "icon": "Wifi",
        "severity": "high",
        "color": "text-neon-orange",
        "examples": ["Traffic flooding", "Resource exhaustion", "Application layer attacks", "Amplification attacks"]
    },
    {
        "id": "deepfake_ai",
        "name": "Deepfake & AI Attacks",
        "description": "AI-generated content used for fraud, impersonation, or disinformation",
        "icon": "Eye",
        "severity": "medium",
        "color": "text-neon-purple",
        "examples": ["Voice cloning", "Face swapping", "Text generation", "Synthetic media"]
    },
]

# ==================== Mock detection tables ====================

MOCK_INDICATORS = {
    "network_intrusion": ["Unusual port scanning activity", "Multiple failed login attempts", "Privilege escalation detected"],
    "malware_ransomware": ["Suspicious file encryption patterns", "Unknown process execution", "Registry modifications"],
    "phishing_social": ["Suspicious email domain", "Credential harvesting attempt", "Social engineering patterns"],
    "insider_threats": ["After-hours file access", "Unusual data volume transfer", "Privilege escalation attempt"],
    "zero_day_apt": ["Unknown attack signature", "Persistent backdoor activity", "Covert channel communication"],
    "data_exfiltration": ["Large outbound data transfer", "Unauthorized cloud storage access", "DNS tunneling detected"],
    "ddos_attacks": ["Traffic volume spike", "Resource exhaustion pattern", "Distributed source IPs"],
    "deepfake_ai": ["Synthetic media markers", "Voice pattern anomalies", "Generated content signatures"],
}

MOCK_MITIGATIONS = {
    "network_intrusion": ["Block suspicious IP addresses", "Reset compromised credentials", "Monitor network traffic"],
    "malware_ransomware": ["Isolate infected systems", "Restore from clean backups", "Update antivirus signatures"],
    "phishing_social": ["Block malicious domains", "User security awareness training", "Email filtering enhancement"],
    "insider_threats": ["Review user access privileges", "Monitor user activity", "Implement data loss prevention"],
    "zero_day_apt": ["Apply emergency patches", "Implement behavioral monitoring", "Threat hunting activities"],
    "data_exfiltration": ["Block data transfer channels", "Monitor sensitive data access", "Implement DLP policies"],
    "ddos_attacks": ["Enable DDoS protection", "Scale infrastructure", "Implement rate limiting"],
    "deepfake_ai": ["Verify content authenticity", "Implement detection algorithms", "User awareness training"],
}

AFFECTED_ASSETS = {
    "network_intrusion": ["Web servers", "Database servers", "Network infrastructure"],
    "malware_ransomware": ["Employee workstations", "File servers", "Backup systems"],
    "phishing_social": ["Email systems", "User accounts", "Authentication services"],
    "insider_threats": ["Internal databases", "File shares", "HR systems"],
    "zero_day_apt": ["Critical infrastructure", "Domain controllers", "Sensitive databases"],
    "data_exfiltration": ["Customer databases", "Financial records", "Intellectual property"],
    "ddos_attacks": ["Public web services", "API endpoints", "CDN infrastructure"],
    "deepfake_ai": ["Communication platforms", "Social media accounts", "Video conferencing"],
}

# {threat_type} is substituted
EXPLANATION_TEMPLATES = {
    "network_intrusion": "AI detected {threat_type} through anomalous network traffic patterns and behavioral analysis indicating potential unauthorized access.",
    "malware_ransomware": "Machine learning algorithms identified {threat_type} based on file behavior analysis and system modification patterns typical of malicious software.",
    "phishing_social": "Natural language processing and behavioral analysis detected {threat_type} through suspicious communication patterns and social engineering indicators.",
    "insider_threats": "User behavior analytics identified {threat_type} through deviation from normal access patterns and data handling behavior.",
    "zero_day_apt": "Advanced anomaly detection flagged {threat_type} using machine learning models trained to identify previously unseen attack techniques.",
    "data_exfiltration": "Data flow analysis and behavioral monitoring detected {threat_type} through unusual outbound data transfer patterns and access anomalies.",
    "ddos_attacks": "Network traffic analysis and statistical modeling identified {threat_type} through traffic volume analysis and distribution pattern recognition.",
    "deepfake_ai": "Deep learning models for synthetic media detection identified {threat_type} through content authenticity analysis and generation artifact detection.",
}

DEFAULT_EXPLANATION = "AI-powered analysis detected suspicious activity requiring investigation."

# ==================== Advanced detection tables ====================

ADVANCED_CATEGORY_DATA = {
    "network_intrusion": {
        "threats": ["Port Scan Attack", "Network Reconnaissance", "Lateral Movement"],
        "indicators": ["Unusual port scanning activity", "Multiple failed connection attempts", "Suspicious network traffic patterns"],
        "mitigation_steps": ["Block suspicious IP addresses", "Enable network intrusion detection", "Monitor network traffic closely"],
    },
    "malware_ransomware": {
        "threats": ["Ransomware Encryption", "Malware Execution", "File System Attack"],
        "indicators": ["Rapid file encryption activity", "Unknown process execution", "Registry modification attempts"],
        "mitigation_steps": ["Isolate affected systems", "Run comprehensive malware scan", "Restore from clean backups"],
    },
    "phishing_social": {
        "threats": ["Phishing Campaign", "Social Engineering", "Credential Theft"],
        "indicators": ["Suspicious email patterns", "Recently registered domains", "High template similarity"],
        "mitigation_steps": ["Block malicious domains", "Train users on phishing awareness", "Implement email filtering"],
    },
    "insider_threats": {
        "threats": ["Data Exfiltration", "Unauthorized Access", "Privilege Escalation"],
        "indicators": ["Unusual access patterns", "Off-hours data access", "Large data transfers"],
        "mitigation_steps": ["Review user access permissions", "Monitor data access logs", "Implement data loss prevention"],
    },
    "zero_day_apt": {
        "threats": ["Advanced Persistent Threat", "Zero-Day Exploit", "Custom Malware"],
        "indicators": ["Unknown attack signatures", "Advanced evasion techniques", "Persistent system access"],
        "mitigation_steps": ["Implement behavioral monitoring", "Update security signatures", "Conduct forensic analysis"],
    },
    "data_exfiltration": {
        "threats": ["Data Breach", "Information Theft", "Unauthorized Transfer"],
        "indicators": ["Large outbound data transfers", "Unusual network destinations", "Compressed file transfers"],
        "mitigation_steps": ["Block suspicious connections", "Monitor data movement", "Implement data encryption"],
    },
    "ddos_attacks": {
        "threats": ["DDoS Attack", "Traffic Flooding", "Service Disruption"],
        "indicators": ["Massive traffic increase", "Multiple source IPs", "Repeated identical requests"],
        "mitigation_steps": ["Enable DDoS protection", "Implement rate limiting", "Scale infrastructure"],
    },
    "deepfake_ai": {
        "threats": ["Deepfake Media", "Synthetic Content", "AI-Generated Fraud"],
        "indicators": ["Inconsistent compression artifacts", "Temporal inconsistencies", "Synthetic biometric markers"],
        "mitigation_steps": ["Verify media authenticity", "Implement detection algorithms", "Cross-reference with reliable sources"],
    },
}

DEFAULT_ADVANCED_DATA = {
    "threats": ["Unknown Threat"],
    "indicators": ["Suspicious activity detected"],
    "mitigation_steps": ["Investigate further"],
}

# ==================== Network attack tables ====================

NETWORK_ATTACK_TYPES = ["DDoS", "Port Scan", "Brute Force", "SQL Injection", "Malware"]

NETWORK_ATTACK_INDICATORS = {
    "DDoS": ["High volume of requests", "Multiple source IPs", "Repeated payloads"],
    "Port Scan": ["Sequential port access", "Multiple failed connections", "Reconnaissance behavior"],
    "Brute Force": ["Multiple login attempts", "Dictionary attack patterns", "Failed authentication"],
    "SQL Injection": ["SQL keywords in payload", "Database error responses", "Union select attempts"],
    "Malware": ["Suspicious file behavior", "Unknown process execution", "Registry modifications"],
}

NETWORK_ATTACK_MITIGATIONS = {
    "DDoS": ["Enable rate limiting", "Block source IPs", "Activate DDoS protection"],
    "Port Scan": ["Block source IP", "Enable intrusion detection", "Monitor network activity"],
    "Brute Force": ["Lock account", "Implement MFA", "Monitor authentication logs"],
    "SQL Injection": ["Sanitize input", "Use parameterized queries", "Update WAF rules"],
    "Malware": ["Quarantine file", "Run full system scan", "Update antivirus signatures"],
}

# ==================== Explanation tables ====================

KEY_FEATURES = {
    "network_intrusion": [
        {"feature": "Port Scan Frequency", "importance": 0.85, "value": "15 ports/sec", "explanation": "Unusually high port scanning rate"},
        {"feature": "Connection Pattern", "importance": 0.72, "value": "Sequential", "explanation": "Systematic reconnaissance behavior"},
        {"feature": "Protocol Distribution", "importance": 0.68, "value": "TCP-heavy", "explanation": "Abnormal protocol usage for time period"},
    ],
    "malware_ransomware": [
        {"feature": "File Encryption Rate", "importance": 0.92, "value": "150 files/min", "explanation": "Rapid file modification consistent with ransomware"},
        {"feature": "Process Behavior", "importance": 0.88, "value": "Abnormal", "explanation": "Unknown process with system-level access"},
        {"feature": "Registry Changes", "importance": 0.75, "value": "Persistence keys", "explanation": "Modifications to startup registry entries"},
    ],
    "phishing_social": [
        {"feature": "Domain Reputation", "importance": 0.89, "value": "Recently registered", "explanation": "Domain created within last 30 days"},
        {"feature": "Email Similarity", "importance": 0.83, "value": "94% match", "explanation": "High similarity to known phishing templates"},
        {"feature": "Urgency Keywords", "importance": 0.71, "value": "Present", "explanation": "Contains social engineering pressure tactics"},
    ],
    "insider_threats": [
        {"feature": "Access Time Anomaly", "importance": 0.87, "value": "3:00 AM", "explanation": "File access outside normal working hours"},
        {"feature": "Data Volume", "importance": 0.79, "value": "500MB", "explanation": "Unusually large data download for user role"},
        {"feature": "Location Variance", "importance": 0.73, "value": "Foreign IP", "explanation": "Access from unexpected geographical location"},
    ],
    "zero_day_apt": [
        {"feature": "Unknown Signature", "importance": 0.95, "value": "No match", "explanation": "Behavior not found in known attack databases"},
        {"feature": "Persistence Score", "importance": 0.88, "value": "High", "explanation": "Multiple persistence mechanisms detected"},
        {"feature": "Stealth Indicators", "importance": 0.81, "value": "Advanced", "explanation": "Evidence of evasion techniques"},
    ],
    "data_exfiltration": [
        {"feature": "Outbound Data Size", "importance": 0.91, "value": "2.5GB", "explanation": "Large volume of data leaving the network"},
        {"feature": "Destination Analysis", "importance": 0.84, "value": "Suspicious", "explanation": "Data sent to unrecognized external server"},
        {"feature": "Timing Pattern", "importance": 0.76, "value": "Off-hours", "explanation": "Transfer initiated during low-activity period"},
    ],
    "ddos_attacks": [
        {"feature": "Traffic Volume", "importance": 0.93, "value": "1000x normal", "explanation": "Massive spike in incoming requests"},
        {"feature": "Source Distribution", "importance": 0.86, "value": "Botnet pattern", "explanation": "Requests from multiple coordinated sources"},
        {"feature": "Request Patterns", "importance": 0.78, "value": "Identical payloads", "explanation": "Repeated identical malformed requests"},
    ],
    "deepfake_ai": [
        {"feature": "Compression Artifacts", "importance": 0.87, "value": "Detected", "explanation": "Inconsistent compression patterns in media"},
        {"feature": "Temporal Consistency", "importance": 0.82, "value": "Low", "explanation": "Frame-to-frame inconsistencies in video"},
        {"feature": "Biometric Markers", "importance": 0.74, "value": "Synthetic", "explanation": "Facial or voice patterns show AI generation signs"},
    ],
}

DEFAULT_KEY_FEATURES = [
    {"feature": "Anomaly Score", "importance": 0.8, "value": "High", "explanation": "General suspicious behavior detected"},
]

# {confidence_pct} is substituted, already formatted with one decimal
REASONING_TEMPLATES = {
    "network_intrusion": "The AI model detected network intrusion with {confidence_pct}% confidence based on unusual traffic patterns, systematic port scanning behavior, and deviation from normal network baselines. The combination of high-frequency scanning and sequential targeting patterns strongly indicates reconnaissance activity.",
    "malware_ransomware": "Machine learning algorithms identified malware activity with {confidence_pct}% confidence through behavioral analysis of file system changes, process execution patterns, and system modification activities. The rapid file encryption rate and registry persistence mechanisms are characteristic of ransomware behavior.",
    "phishing_social": "Natural language processing and behavioral analysis detected phishing attempt with {confidence_pct}% confidence. The combination of recently registered domains, template similarity to known phishing campaigns, and social engineering language patterns indicates a coordinated attack.",
    "insider_threats": "User behavior analytics identified potential insider threat with {confidence_pct}% confidence based on significant deviations from normal user patterns. Unusual access times, data volumes, and geographical locations suggest unauthorized or malicious activity.",
    "zero_day_apt": "Advanced persistent threat detection algorithms flagged unknown attack techniques with {confidence_pct}% confidence. The presence of novel signatures, sophisticated persistence mechanisms, and advanced evasion techniques indicates a zero-day exploit or APT activity.",
    "data_exfiltration": "Data loss prevention algorithms detected potential exfiltration with {confidence_pct}% confidence based on unusual outbound data patterns. Large volume transfers to unknown destinations during off-hours strongly suggest unauthorized data movement.",
    "ddos_attacks": "Distributed denial of service detection identified attack pattern with {confidence_pct}% confidence through traffic analysis and statistical modeling. The massive volume increase from coordinated sources with identical payloads confirms DDoS activity.",
    "deepfake_ai": "Synthetic media detection algorithms identified artificial content with {confidence_pct}% confidence using deep learning models trained on authentic vs. generated media. Compression inconsistencies and biometric anomalies indicate AI-generated content.",
}

DEFAULT_REASONING = "AI analysis completed with {confidence_pct}% confidence based on anomaly detection and behavioral analysis."

SIMILAR_CASES = [
    "Similar attack detected 2 weeks ago",
    "Pattern matches APT-29 techniques",
    "Correlates with recent threat intelligence",
]

DETECTION_CAPABILITIES = [
    "Behavioral analysis for anomaly detection",
    "Machine learning pattern recognition",
    "Real-time threat intelligence correlation",
    "Automated response recommendations",
]

SIMULATION_PARAMETERS = [
    "Data volume: Configurable (10-10000 records)",
    "Attack intensity: Low, Medium, High, Critical",
    "Time window: 1 minute to 24 hours",
    "Target systems: Web servers, databases, endpoints",
]

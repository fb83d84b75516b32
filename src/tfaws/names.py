"""Service identifiers, boto3 client names and reserved tag prefixes."""

from typing import Dict, Tuple

KAFKA = "kafka"
INTERNET_MONITOR = "internetmonitor"
SSM_CONTACTS = "ssmcontacts"
SSM_INCIDENTS = "ssmincidents"

# Service package name -> boto3 client name.
CLIENT_NAMES: Dict[str, str] = {
    KAFKA: "kafka",
    INTERNET_MONITOR: "internetmonitor",
    SSM_CONTACTS: "ssm-contacts",
    SSM_INCIDENTS: "ssm-incidents",
}

AWS_TAG_PREFIX = "aws:"

# Tag prefixes owned by a service in addition to "aws:".
SYSTEM_TAG_PREFIXES: Dict[str, Tuple[str, ...]] = {
    "cloudformation": ("aws:cloudformation:",),
    "elasticbeanstalk": ("elasticbeanstalk:",),
    "ec2": ("aws:ec2spot:", "aws:ec2launchtemplate:"),
}


def system_tag_prefixes(service: str) -> Tuple[str, ...]:
    """All reserved tag key prefixes for a service, "aws:" first."""
    return (AWS_TAG_PREFIX,) + SYSTEM_TAG_PREFIXES.get(service, ())


def client_name(service: str) -> str:
    return CLIENT_NAMES.get(service, service)

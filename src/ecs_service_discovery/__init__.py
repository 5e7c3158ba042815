"""
ecs-service-discovery: Route 53 A records for Amazon ECS services.

Discovers the running tasks of ECS services and upserts one A record per
service pointing at the private IPv4 addresses of its running containers.
"""

__version__ = "0.1.0"

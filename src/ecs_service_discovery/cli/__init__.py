"""
CLI tools for ecs-service-discovery.

Entry points:
    - ecs-service-discovery: Upsert Route 53 A records for ECS services
"""

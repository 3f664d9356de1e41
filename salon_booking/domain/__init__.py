"""Domain layer: router, service, repository and schemas per area"""

from rest_framework.throttling import UserRateThrottle


class ApiRateThrottle(UserRateThrottle):
    scope = 'api'


class GenerateRateThrottle(UserRateThrottle):
    """Stricter limit for endpoints that start a paid generation"""
    scope = 'generate'

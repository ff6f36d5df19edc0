"""
Core exceptions for jctl
"""

class JctlError(Exception):
    """Base exception for jctl"""
    pass

class ConfigError(JctlError):
    """Configuration related errors"""
    pass

class ServiceError(JctlError):
    """Service layer errors"""
    pass


class JourneyError(ServiceError):
    """Journey engine errors"""
    pass


class JourneyParseError(JourneyError):
    """Journey file could not be parsed (malformed JSON/YAML)"""
    pass


class JourneySchemaError(JourneyError):
    """Journey or component declaration violates its structural schema"""
    pass


class JourneyReferenceError(JourneyError):
    """Dangling page or field reference"""
    pass


class JourneyLogicError(JourneyError):
    """Structurally valid but semantically wrong configuration"""
    pass


class ConfigurationFault(JourneyError):
    """Navigation resolved to a page that does not exist in the journey"""
    pass

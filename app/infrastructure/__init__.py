"""Infrastructure modules for the credential sync service.

Centralized infrastructure components:
- configuration: Settings management (Settings, AuthSyncSettings, RetrySettings)
- logging: Structured logging with secret redaction (get_module_logger)
- resilience: Circuit breakers and retry policy
- security: Secret container for credential values
- services: Dependency injection services (SettingsDep, get_settings)
"""

"""Application-wide constants.

Field lengths, token sizes and defaults shared between models,
schemas and services.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_DOMAIN_LENGTH = 255
MAX_IPV6_LENGTH = 45
MAX_USER_AGENT_LENGTH = 512
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_CODE_LENGTH = 150
MAX_PERMISSION_MODULE_LENGTH = 100
MAX_PERMISSION_ACTION_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 255
MAX_AUDIT_ACTION_LENGTH = 100
MAX_ENTITY_TYPE_LENGTH = 100
MAX_ENTITY_ID_LENGTH = 64
MAX_REQUEST_ID_LENGTH = 64
MAX_STATUS_LENGTH = 50

# Password requirements
MIN_PASSWORD_LENGTH = 12
MAX_PASSWORD_LENGTH = 128

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32
MAX_JTI_LENGTH = 64

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"

# Headers
TENANT_HEADER = "X-Tenant-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Audit
DEFAULT_AUDIT_RETENTION_YEARS = 2
REDACTED_VALUE = "[FILTERED]"
DEFAULT_SENSITIVE_FIELDS = (
    "password",
    "api_key",
    "secret",
    "credit_card",
    "token",
    "ssn",
)

# Permission wildcards
WILDCARD_PERMISSION = "*"

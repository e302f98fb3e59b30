"""Version identifiers reported by the health check."""

# Package release
SDK_VERSION = "0.1.0"

# Bridge protocol revision understood by this package
FRAMEWORK_VERSION = "2024-06-26"

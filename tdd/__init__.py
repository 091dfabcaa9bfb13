# repoforge test suite
# This package contains all tests organized by type:
# - unit/: Fast, isolated tests for individual functions/classes
# - integration/: Provisioning scenarios across database, gateway and filesystem

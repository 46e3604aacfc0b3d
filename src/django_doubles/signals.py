from django.dispatch import Signal

# Signal arguments: proxy, expectation
expectation_added = Signal()

# Signal arguments: space, failures
space_verified = Signal()

# Signal arguments: space
space_reset = Signal()

# Signal arguments: message, replacement, call_site
deprecation_reported = Signal()

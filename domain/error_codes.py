"""
Standard error codes shared by the domain, repository and service layers.

These error codes allow callers (HTTP handlers, admin tools, tests) to
programmatically handle specific error conditions without parsing error
message text. ``services.error_codes`` re-exports everything here.
"""

# General errors
NOT_FOUND = "not_found"
VALIDATION_ERROR = "validation_error"
STATE_ERROR = "state_error"
PERMISSION_DENIED = "permission_denied"
UNAUTHORIZED = "unauthorized"

# User errors
USER_NOT_FOUND = "user_not_found"

# Bet errors
BET_NOT_FOUND = "bet_not_found"
BET_NOT_ACTIVE = "bet_not_active"
BET_ALREADY_COMPLETED = "bet_already_completed"
BET_HAS_PARTICIPATIONS = "bet_has_participations"
INVALID_OPTION = "invalid_option"
INVALID_WINNING_OPTION = "invalid_winning_option"
INVALID_COMMISSION_RATE = "invalid_commission_rate"

# Participation errors
PARTICIPATION_NOT_FOUND = "participation_not_found"
DUPLICATE_PARTICIPATION = "duplicate_participation"

# Economy errors
INVALID_AMOUNT = "invalid_amount"
INSUFFICIENT_FUNDS = "insufficient_funds"

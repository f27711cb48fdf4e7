from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter for endpoints that spend LLM credits
limiter = Limiter(key_func=get_remote_address)

LLM_RATE_LIMIT = "20/minute"

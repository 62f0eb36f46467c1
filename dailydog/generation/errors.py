"""Article generation errors"""


class GenerationError(Exception):
    """Generation failed or is not configured"""


class GenerationTimeoutError(GenerationError):
    """Provider did not answer within the deadline"""


class QuotaExceededError(GenerationError):
    """Provider rejected the request for quota or rate limits"""

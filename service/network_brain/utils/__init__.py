from .normalize import validate_linkedin_url, slugify_key

__all__ = ["validate_linkedin_url", "slugify_key"]

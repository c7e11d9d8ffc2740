"""Core domain package for stickertag.

Core contains the tag index, the tagging conversation and the dialogue rules
without any Telegram or storage-specific code, keeping the business logic
portable.
"""

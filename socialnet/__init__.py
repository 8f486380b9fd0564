"""
SocialNet API - users, follows, posts, comments and likes over REST.
"""

__version__ = "1.0.0"

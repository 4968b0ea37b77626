"""
LineMate: LINE webhook relay.

Text messages are stored in Google Sheets and confirmed to the user; audio messages
are downloaded, transcribed with OpenAI STT, stored and pushed back as text.
"""

__version__ = "0.1.0"

"""External collaborators: Gemini client access, credentials, saved media."""

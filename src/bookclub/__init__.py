# ABOUTME: Bookclub - book identity resolution for chat-based review communities.
# ABOUTME: Matches free-text book mentions to catalog entries through a short dialogue.

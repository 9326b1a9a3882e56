"""Host system collaborators (battery, timezone)"""

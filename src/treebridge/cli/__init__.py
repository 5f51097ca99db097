"""Command-line interface for treebridge."""

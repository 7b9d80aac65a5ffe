"""http surface and request dispatch"""

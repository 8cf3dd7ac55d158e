"""
Check-all-that-apply authoring and grading
"""

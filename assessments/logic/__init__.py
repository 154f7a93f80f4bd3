"""Questionnaire engine, repositories and session controllers."""

"""Data models: question type taxonomy and pydantic wire models."""

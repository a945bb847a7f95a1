"""Event quiz backend.

This package attaches graded quizzes to events. It exposes the grading
engine, the interchangeable data stores (transactional, remote,
in-memory), the quiz service that wraps one of them, and the FastAPI
application. Individual modules contain the concrete implementations
and documentation.
"""

"""Classroom attendance codes package.

Organized by feature modules (codes, polls, attendance, enrollment) with a thin
Flask controller layer over service/repository layers.
"""

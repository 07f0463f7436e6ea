#!/usr/bin/env python3
"""
Main entry point for the course platform client
"""

from course_client.main import run

if __name__ == "__main__":
    run()

#!/usr/bin/env python3
"""Main entry point for the ResumeBoost backend."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__)))

from resumeboost.api.server import run_server

if __name__ == '__main__':
    print("=" * 60)
    print("ResumeBoost Backend - Starting Server")
    print("=" * 60)
    print("\nEndpoints:")
    print("  GET  /status/<id>     - Auto-apply progress")
    print("  POST /order           - Create a checkout order")
    print("  GET  /blog/posts      - Published blog posts")
    print("  GET  /preferences     - Job preferences for the caller")
    print("  GET  /webinars/<id>/updates - Webinar updates")
    print("  POST /generate-text   - LLM text generation")
    print("  GET  /health          - Health check")
    print("\n" + "=" * 60)

    run_server()

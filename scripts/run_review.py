#!/usr/bin/env python3
"""Run a code review locally against a pull request."""
import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from pr_assistant.services.assistant.activities import ActivityProxy, AssistantActivities
from pr_assistant.services.reviewer.schemas import ReviewRequest
from pr_assistant.services.reviewer.service import review_code_changes


async def main(org: str, repo: str, pr_number: int):
    request = ReviewRequest(org=org, repo=repo, pull_request_number=pr_number)
    result = await review_code_changes(request, ActivityProxy(AssistantActivities()))
    print(f"Review result: {result.model_dump_json(indent=2)}")

if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("Usage: run_review.py <org> <repo> <pr_number>")
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2], int(sys.argv[3])))

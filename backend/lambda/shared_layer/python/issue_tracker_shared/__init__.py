"""issue_tracker_shared — Shared code for the Issue Tracker Lambda functions.

Provides:
    - Issue model, request payloads and the response envelope
    - Create/update payload validation
    - Record store contract with DynamoDB and in-memory implementations
    - IssueService orchestration
    - API Gateway request handlers and HTTP response helpers
    - Composition root (startup.build_issue_service)
"""

__version__ = "1.0.0"

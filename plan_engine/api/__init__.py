"""
Plan Engine HTTP API

Endpoints:
- POST /plans/executions - Start a plan
- GET  /plans/executions - Registered executions
- GET  /plans/{plan_id}/execution - Execution state
- POST /plans/{plan_id}/execution/next - Run the step at the cursor
- POST /plans/{plan_id}/execution/pause|resume|stop - Control
- POST /plans/{plan_id}/execution/steps/{index}/retry - Retry a step
- GET  /health - Health check
"""

from .app import create_app, app

__all__ = ["create_app", "app"]

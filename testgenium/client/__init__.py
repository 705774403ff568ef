# testgenium/client/__init__.py
from testgenium.client.poller import PollTimeout, poll_job

__all__ = ["PollTimeout", "poll_job"]

# leavesync/slackapp/exceptions.py

"""Errors raised at the Slack boundary. None of them ever reach Slack itself."""


class SlackIntegrationError(Exception):
    """Base class for Slack integration errors."""


class SignatureVerificationError(SlackIntegrationError):
    """The request is not provably from Slack: bad, missing or stale signature."""


class PayloadParseError(SlackIntegrationError):
    """A webhook body or one of its fields could not be parsed."""


class MetadataEncodeError(SlackIntegrationError):
    """An InteractionContext does not fit into a view's private_metadata."""


class MetadataDecodeError(SlackIntegrationError):
    """A view's private_metadata is not a valid InteractionContext."""


class SlackCommunicationError(SlackIntegrationError):
    """A call to the Slack Web API failed."""

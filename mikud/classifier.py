"""Response classification for the Israel Post SearchZip agent.

The upstream replies with loosely formatted text rather than a stable
contract. A reply is classified by walking an ordered list of rules;
the first rule that produces an outcome wins. Checks go from the most
specific (transport failures, challenge pages, the strict success
token) to the most generic (any RES code, then nothing recognizable).

Adding a new upstream quirk means inserting a rule at the right
priority, without touching the existing ones.
"""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from .models import ErrorKind, LookupResult, ZipLookupError
from .zip_validator import is_valid_zipcode

logger = logging.getLogger(__name__)


# Lowercase fingerprints of anti-automation challenge pages
BOT_PROTECTION_MARKERS: tuple[str, ...] = (
    "radware captcha",
    "captcha",
    "shieldsquare",
    "perfdrive.com",
    "protection service",
    "access denied",
    "blocked",
)

# RES8 + 7-digit zipcode
SUCCESS_PATTERN = re.compile(r"RES8(\d{7})", re.ASCII)
# Any RES code
RES_CODE_PATTERN = re.compile(r"RES(\d+)", re.ASCII)

NOT_FOUND_PREFIXES = ("0", "1", "2")


class TransportFailure(str, Enum):
    """How the request failed before a response was read."""

    TIMEOUT = "timeout"         # Deadline hit or request cancelled
    CONNECTION = "connection"   # DNS, refused, unreachable
    OTHER = "other"             # Anything else raised by the client


@dataclass(slots=True, frozen=True)
class ResponseContext:
    """Everything the rules may look at.

    Attributes:
        body: Raw response text ("" when the request failed).
        status: HTTP status code (None when the request failed).
        reason: HTTP reason phrase.
        failure: Transport failure category, if any.
        failure_detail: Message from the transport exception.
    """

    body: str = ""
    status: int | None = None
    reason: str = ""
    failure: TransportFailure | None = None
    failure_detail: str = ""


Outcome = LookupResult | None


@dataclass(slots=True, frozen=True)
class ClassificationRule:
    """A named predicate -> outcome step. Returns None to pass."""

    name: str
    apply: Callable[[ResponseContext, Callable[[str], bool]], Outcome]


def _fail(kind: ErrorKind, message: str | None = None, **details) -> LookupResult:
    return LookupResult.fail(ZipLookupError(kind, message, **details))


def _timeout(ctx: ResponseContext, validate) -> Outcome:
    if ctx.failure is TransportFailure.TIMEOUT:
        return _fail(ErrorKind.TIMEOUT)
    return None


def _network(ctx: ResponseContext, validate) -> Outcome:
    if ctx.failure is TransportFailure.CONNECTION:
        return _fail(ErrorKind.NETWORK_UNAVAILABLE)
    return None


def _transport_other(ctx: ResponseContext, validate) -> Outcome:
    if ctx.failure is TransportFailure.OTHER:
        return _fail(
            ErrorKind.SERVICE_UNAVAILABLE,
            f"Error calling Israeli Post: {ctx.failure_detail}. "
            "The service might be temporarily unavailable.",
        )
    return None


def _http_status(ctx: ResponseContext, validate) -> Outcome:
    if ctx.status is not None and not 200 <= ctx.status < 300:
        return _fail(ErrorKind.HTTP_ERROR, status=ctx.status, status_text=ctx.reason)
    return None


def _bot_protection(ctx: ResponseContext, validate) -> Outcome:
    lower_body = ctx.body.lower()
    if any(marker in lower_body for marker in BOT_PROTECTION_MARKERS):
        return _fail(ErrorKind.BOT_PROTECTION)
    return None


def _success_token(ctx: ResponseContext, validate) -> Outcome:
    match = SUCCESS_PATTERN.search(ctx.body)
    if not match:
        return None
    zipcode = match.group(1)
    if not validate(zipcode):
        return _fail(ErrorKind.MALFORMED_ZIP)
    return LookupResult.ok(zipcode)


def _res_code(ctx: ResponseContext, validate) -> Outcome:
    match = RES_CODE_PATTERN.search(ctx.body)
    if not match:
        return None
    code = match.group(1)
    if code.startswith(NOT_FOUND_PREFIXES):
        return _fail(ErrorKind.ADDRESS_NOT_FOUND)
    if not code.startswith("8"):
        return _fail(ErrorKind.UPSTREAM_ERROR, code=code)
    # 8-leading but not RES8 + 7 digits
    return _fail(ErrorKind.UNEXPECTED_FORMAT)


def _unrecognized(ctx: ResponseContext, validate) -> Outcome:
    return _fail(ErrorKind.SERVICE_UNAVAILABLE)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("timeout", _timeout),
    ClassificationRule("network", _network),
    ClassificationRule("transport_other", _transport_other),
    ClassificationRule("http_status", _http_status),
    ClassificationRule("bot_protection", _bot_protection),
    ClassificationRule("success_token", _success_token),
    ClassificationRule("res_code", _res_code),
    ClassificationRule("unrecognized", _unrecognized),
)


class ResponseClassifier:
    """Turns a raw upstream reply into a LookupResult.

    Usage:
        classifier = ResponseClassifier()
        result = classifier.classify(body="...RES87654321...", status=200)
    """

    __slots__ = ("rules", "validator")

    def __init__(
        self,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
        validator: Callable[[str], bool] = is_valid_zipcode,
    ):
        self.rules = tuple(rules)
        self.validator = validator

    def classify(
        self,
        body: str = "",
        status: int | None = None,
        reason: str = "",
        failure: TransportFailure | None = None,
        failure_detail: str = "",
    ) -> LookupResult:
        """Classify one reply.

        Args:
            body: Response text.
            status: HTTP status, None if the transport failed.
            reason: HTTP reason phrase.
            failure: Transport failure category, if the request failed.
            failure_detail: Exception message for OTHER failures.

        Returns:
            LookupResult with the zipcode or a classified error.
        """
        ctx = ResponseContext(
            body=body or "",
            status=status,
            reason=reason or "",
            failure=failure,
            failure_detail=failure_detail,
        )
        return self.classify_context(ctx)

    def classify_context(self, ctx: ResponseContext) -> LookupResult:
        for rule in self.rules:
            outcome = rule.apply(ctx, self.validator)
            if outcome is not None:
                logger.debug(f"Classified by rule '{rule.name}'")
                return outcome
        # Custom rule lists may omit the catch-all
        return _unrecognized(ctx, self.validator)

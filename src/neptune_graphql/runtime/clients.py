"""
Execution clients for Neptune Database and Neptune Analytics.

Two transports are supported:

- SDK: boto3 ``neptunedata`` (Neptune Database) or ``neptune-graph``
  (Neptune Analytics)
- HTTP: direct HTTPS requests with httpx, optionally signed with SigV4

Connection settings come from the environment (see get_neptune_config).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import cache
from typing import Any, Protocol
from urllib.parse import urlencode

import boto3
import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.exceptions import BotoCoreError, ClientError

from .ast import CompiledQuery
from .decode import untype
from .dialects.gremlin import SERIALIZER
from .errors import QueryExecutionError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8182
MIN_HOST_PARTS = 5
NUM_DOMAIN_PARTS = 3
ANALYTICS_DOMAIN = "neptune-graph.amazonaws.com"

OPENCYPHER = "opencypher"
GREMLIN = "gremlin"


# =============================================================================
# Endpoint parsing
# =============================================================================


def split_host(host: str) -> list[str]:
    """
    Split a Neptune host name into its dot-separated parts.

    Raises:
        ValueError: If the host has fewer parts than a Neptune host name
    """
    parts = host.split(".")
    if len(parts) < MIN_HOST_PARTS:
        raise ValueError(
            f"Cannot parse neptune host {host} because it has {len(parts)} part(s) "
            f"delimited by . but expected at least {MIN_HOST_PARTS}"
        )
    return parts


def parse_domain(host: str) -> str:
    """
    Domain of a Neptune host.

    Examples:
        - g-abcdef.us-west-2.neptune-graph.amazonaws.com -> neptune-graph.amazonaws.com
        - db-neptune-abc.cluster-xyz.us-west-2.neptune.amazonaws.com -> neptune.amazonaws.com
    """
    return ".".join(split_host(host)[-NUM_DOMAIN_PARTS:])


def parse_graph_name(host: str) -> str:
    """Graph or cluster name: the first part of the host."""
    return split_host(host)[0]


def parse_region(host: str) -> str | None:
    """Region embedded in a Neptune host name, or None for other hosts."""
    try:
        parts = split_host(host)
    except ValueError:
        return None
    return parts[-(NUM_DOMAIN_PARTS + 1)]


@dataclass(frozen=True)
class NeptuneConfig:
    """
    Neptune connection settings.

    Attributes:
        host: Endpoint host name
        port: Endpoint port
        region: AWS region, parsed from the host when not given
        iam_auth: Sign HTTP requests with SigV4
    """

    host: str
    port: int = DEFAULT_PORT
    region: str | None = None
    iam_auth: bool = False

    @property
    def is_analytics(self) -> bool:
        return self.host.endswith(ANALYTICS_DOMAIN)

    @property
    def graph_identifier(self) -> str:
        return parse_graph_name(self.host)

    @property
    def endpoint_url(self) -> str:
        return f"https://{self.host}:{self.port}"

    @property
    def signing_service(self) -> str:
        return "neptune-graph" if self.is_analytics else "neptune-db"

    @classmethod
    def from_endpoint(
        cls, endpoint: str, iam_auth: bool = False, region: str | None = None
    ) -> NeptuneConfig:
        """Build a config from ``host:port`` (a scheme prefix is ignored)."""
        endpoint = endpoint.split("://", 1)[-1].rstrip("/")
        host, _, port = endpoint.partition(":")
        return cls(
            host=host,
            port=int(port) if port else DEFAULT_PORT,
            region=region or parse_region(host),
            iam_auth=iam_auth,
        )


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@cache
def get_neptune_config() -> NeptuneConfig:
    """Load Neptune settings from environment variables.

    Environment variables:
        - NEPTUNE_ENDPOINT (host:port), or NEPTUNE_HOST and NEPTUNE_PORT
        - NEPTUNE_IAM_AUTH → iam_auth (true/false)
        - AWS_REGION → region (otherwise parsed from the host)

    Raises:
        ValueError: If no endpoint is configured
    """
    endpoint = os.environ.get("NEPTUNE_ENDPOINT")
    if not endpoint:
        host = os.environ.get("NEPTUNE_HOST")
        if not host:
            raise ValueError("Set NEPTUNE_ENDPOINT or NEPTUNE_HOST")
        endpoint = f"{host}:{os.environ.get('NEPTUNE_PORT', DEFAULT_PORT)}"
    return NeptuneConfig.from_endpoint(
        endpoint,
        iam_auth=_env_flag("NEPTUNE_IAM_AUTH"),
        region=os.environ.get("AWS_REGION"),
    )


# =============================================================================
# Executors
# =============================================================================


class Executor(Protocol):
    """Runs a compiled query and returns its result rows."""

    def execute(self, language: str, query: CompiledQuery) -> list[Any]: ...


class SdkExecutor:
    """Executes queries through the AWS SDK (boto3)."""

    def __init__(self, config: NeptuneConfig, client: Any | None = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.region:
                kwargs["region_name"] = self.config.region
            if self.config.is_analytics:
                self._client = boto3.client("neptune-graph", **kwargs)
            else:
                kwargs["endpoint_url"] = self.config.endpoint_url
                self._client = boto3.client("neptunedata", **kwargs)
        return self._client

    def execute(self, language: str, query: CompiledQuery) -> list[Any]:
        try:
            if self.config.is_analytics:
                if language != OPENCYPHER:
                    raise QueryExecutionError(
                        "Neptune Analytics only supports openCypher", query.text
                    )
                response = self.client.execute_query(
                    graphIdentifier=self.config.graph_identifier,
                    queryString=query.text,
                    language="OPEN_CYPHER",
                    parameters=query.parameters,
                )
                return json.loads(response["payload"].read())["results"]
            if language == OPENCYPHER:
                response = self.client.execute_open_cypher_query(
                    openCypherQuery=query.text, parameters=json.dumps(query.parameters)
                )
                return response["results"]
            response = self.client.execute_gremlin_query(
                gremlinQuery=query.text, serializer=SERIALIZER
            )
            return _gremlin_rows(response["result"]["data"])
        except (ClientError, BotoCoreError) as e:
            raise QueryExecutionError(str(e), query.text) from e


class HttpExecutor:
    """Executes queries over HTTPS with httpx."""

    def __init__(
        self,
        config: NeptuneConfig,
        http_client: httpx.Client | None = None,
        credentials: Any | None = None,
        timeout: float = 30.0,
    ):
        self.config = config
        self.http = http_client or httpx.Client(timeout=timeout)
        self._credentials = credentials

    @property
    def credentials(self) -> Any:
        if self._credentials is None:
            self._credentials = boto3.Session().get_credentials()
        return self._credentials

    def _request(self, language: str, query: CompiledQuery) -> tuple[str, str, dict[str, str]]:
        base = self.config.endpoint_url
        if self.config.is_analytics:
            body = json.dumps(
                {"query": query.text, "language": "OPEN_CYPHER", "parameters": query.parameters}
            )
            headers = {
                "Content-Type": "application/json",
                "graphIdentifier": self.config.graph_identifier,
            }
            return f"{base}/queries", body, headers
        if language == OPENCYPHER:
            body = urlencode({"query": query.text, "parameters": json.dumps(query.parameters)})
            return (
                f"{base}/openCypher",
                body,
                {"Content-Type": "application/x-www-form-urlencoded"},
            )
        body = json.dumps({"gremlin": query.text})
        return (
            f"{base}/gremlin",
            body,
            {"Content-Type": "application/json", "Accept": SERIALIZER},
        )

    def _sign(self, url: str, body: str, headers: dict[str, str]) -> dict[str, str]:
        request = AWSRequest(method="POST", url=url, data=body, headers=headers)
        SigV4Auth(self.credentials, self.config.signing_service, self.config.region).add_auth(
            request
        )
        return dict(request.headers.items())

    def execute(self, language: str, query: CompiledQuery) -> list[Any]:
        if self.config.is_analytics and language != OPENCYPHER:
            raise QueryExecutionError("Neptune Analytics only supports openCypher", query.text)
        url, body, headers = self._request(language, query)
        if self.config.iam_auth:
            headers = self._sign(url, body, headers)
        try:
            response = self.http.post(url, content=body.encode("utf-8"), headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise QueryExecutionError(
                f"Neptune returned {e.response.status_code}: {e.response.text}", query.text
            ) from e
        except httpx.HTTPError as e:
            raise QueryExecutionError(f"Request to {url} failed: {e}", query.text) from e

        payload = response.json()
        if language == OPENCYPHER:
            return payload["results"]
        return _gremlin_rows(payload["result"]["data"])


def _gremlin_rows(data: Any) -> list[Any]:
    data = untype(data)
    if data is None:
        return []
    return data if isinstance(data, list) else [data]


def create_executor(client: str, config: NeptuneConfig | None = None) -> Executor:
    """
    Create the executor for an execution client name ("sdk" or "http").

    Raises:
        ValueError: If the client name is unknown
    """
    config = config or get_neptune_config()
    if client == "sdk":
        return SdkExecutor(config)
    if client == "http":
        return HttpExecutor(config)
    raise ValueError(f"Unknown execution client '{client}'. Available: sdk, http")

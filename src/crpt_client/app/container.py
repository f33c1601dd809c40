from __future__ import annotations

import logging
from datetime import timedelta

from dependency_injector import containers, providers

from ..config.urls import get_auth_challenge_url, get_auth_token_url, get_document_create_url
from ..core.domain.enums import TimeUnit
from ..core.domain.models import Window
from ..core.ports.clock_port import SystemClock
from ..core.services.auth_challenge import AuthChallengeFlow
from ..core.services.credential_cache import CredentialCache
from ..core.usecases.submission_gate import SubmissionGate
from ..errors import ConfigurationError
from ..infra.http_client import HttpClient
from ..infra.permit_pool import FixedWindowPermitPool
from ..infra.signers import CommandSigner

logger = logging.getLogger(__name__)


def http_client_resource(timeout_seconds):
	logger.debug("Initializing HTTP client (timeout=%ss)", timeout_seconds)
	with HttpClient(timeout_seconds=timeout_seconds) as client:
		yield client
	logger.debug("HTTP client closed")


def permit_pool_resource(request_limit, window_unit, window_count):
	"""Create the permit pool with its ticker running; the ticker stops on shutdown."""
	unit = window_unit if isinstance(window_unit, TimeUnit) else TimeUnit.from_str(str(window_unit))
	window = Window(unit=unit, count=window_count)
	with FixedWindowPermitPool(capacity=request_limit, window=window) as pool:
		yield pool


def command_signer(signer_command):
	if not signer_command:
		raise ConfigurationError(
			"No signer configured: pass signer=... or set CRPT_CLIENT_SIGNER_COMMAND"
		)
	logger.info("Using external signer command")
	return CommandSigner(signer_command)


class Container(containers.DeclarativeContainer):
	config = providers.Configuration()

	clock = providers.Singleton(SystemClock)

	http_client = providers.Resource(
		http_client_resource,
		timeout_seconds=config.timeout_seconds,
	)

	permit_pool = providers.Resource(
		permit_pool_resource,
		request_limit=config.request_limit,
		window_unit=config.window_unit,
		window_count=config.window_count,
	)

	# Overridden by CrptClient when a signer object is passed in
	signer = providers.Singleton(command_signer, signer_command=config.signer_command)

	auth_flow = providers.Factory(
		AuthChallengeFlow,
		transport=http_client,
		signer=signer,
		clock=clock,
		challenge_url=providers.Callable(get_auth_challenge_url, config.base_url),
		token_url=providers.Callable(get_auth_token_url, config.base_url),
		lifetime=providers.Callable(timedelta, hours=config.token_lifetime_hours),
	)

	credential_cache = providers.Singleton(
		CredentialCache,
		issuer=auth_flow,
		clock=clock,
		refresh_margin=providers.Callable(timedelta, seconds=config.refresh_margin_seconds),
	)

	submission_gate = providers.Singleton(
		SubmissionGate,
		permits=permit_pool,
		credentials=credential_cache,
		transport=http_client,
		create_url=providers.Callable(get_document_create_url, config.base_url),
	)

# main.py
"""Harper Slack bot entry point."""

import logging

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_sdk import WebClient

from events import EventDeduplicator, EventProcessor
from field_interpreter import FieldInterpreter
from handlers.general import GeneralHandler
from handlers.github import GithubStubHandler
from handlers.linear import LinearHandler
from handlers.welcome import WelcomeHandler
from intent_detector import IntentDetector
from intent_router import IntentRouter
from linear_client import LinearClient
from llm_client import ChatCompletionClient
from logging_utils import configure_logging
from models import IntentType
from operation_parser import OperationParser
from option_resolver import OptionResolver
from settings import HarperSettings, get_settings
from slack_client import SlackPoster

logger = logging.getLogger(__name__)


def build_router(settings: HarperSettings) -> IntentRouter:
    llm = ChatCompletionClient(
        api_key=settings.openai.api_key,
        model=settings.openai.model,
        base_url=settings.openai.base_url,
        timeout=settings.openai.timeout_seconds,
    )
    linear_client = LinearClient(
        api_key=settings.linear.api_key,
        default_team_id=settings.linear.team_id,
        llm=llm,
        resolver=OptionResolver(llm),
        interpreter=FieldInterpreter(llm),
        endpoint=settings.linear.api_url,
        timeout=settings.linear.timeout_seconds,
    )
    if not settings.linear_configured:
        logger.warning(
            "linear_not_configured",
            extra={
                "has_api_key": bool(settings.linear.api_key),
                "has_team_id": bool(settings.linear.team_id),
            },
        )

    return IntentRouter(
        IntentDetector(llm),
        {
            IntentType.WELCOME: WelcomeHandler(logo_url=settings.branding.logo_url),
            IntentType.LINEAR: LinearHandler(OperationParser(llm), linear_client),
            IntentType.GITHUB: GithubStubHandler(),
            IntentType.GENERAL: GeneralHandler(llm),
        },
    )


def build_processor(settings: HarperSettings, client: WebClient) -> EventProcessor:
    deduplicator = EventDeduplicator(
        ttl_seconds=settings.events.dedup_ttl_seconds,
        sweep_interval=settings.events.dedup_sweep_seconds,
    )
    return EventProcessor(build_router(settings), SlackPoster(client), deduplicator)


def create_app(settings: HarperSettings) -> App:
    app = App(token=settings.slack.bot_token, signing_secret=settings.slack.signing_secret)
    processor = build_processor(settings, app.client)

    @app.event("app_mention")
    def handle_app_mention(body, logger):
        result = processor.handle(body)
        logger.debug(f"app_mention handled: {result}")

    @app.event("message")
    def ignore_plain_messages(body, logger):
        logger.debug("message event ignored")

    return app


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.json_enabled)
    app = create_app(settings)
    if settings.slack.app_token:
        SocketModeHandler(app, settings.slack.app_token).start()
    else:
        app.start(port=settings.slack.port)

"""Main application entry point for Dardasha."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from dardasha import __version__
from dardasha.attachments.handler import FileAttachmentHandler, MAX_ATTACHMENT_BYTES
from dardasha.audio.capture import AudioRecorder, DEFAULT_FORMAT_PREFERENCES
from dardasha.audio.encoder import AudioEncoder
from dardasha.audio.permission import MicrophonePermissionManager
from dardasha.chat.base import AbstractChatBackend
from dardasha.chat.gemini_backend import GeminiChatBackend
from dardasha.chat.openai_backend import OpenAIChatBackend
from dardasha.models.chat import Message, Sender
from dardasha.services.activity import ActivityTracker
from dardasha.services.chat_session import ChatSession
from dardasha.services.conversation import (
    ConversationDispatcher,
    Transcript,
    DEFAULT_FALLBACK_MESSAGE,
    DEFAULT_GREETING,
)
from dardasha.services.notifications import Notifier
from dardasha.services.voice_input import VoiceInputPipeline
from dardasha.transcription.base import AbstractTranscriptionBackend
from dardasha.transcription.client import TranscriptionClient
from dardasha.transcription.gemini_backend import GeminiTranscriptionBackend
from dardasha.transcription.google_backend import GoogleSpeechBackend
from dardasha.ui.chat_screen import ChatScreen

from .config import DardashaConfig

logger = logging.getLogger(__name__)


def create_chat_backend(config: DardashaConfig) -> AbstractChatBackend:
    """Create the chat backend named by chat.provider."""
    provider = config.get('chat.provider', 'gemini')
    base_url = config.get('chat.base_url')
    if provider == 'gemini':
        return GeminiChatBackend(
            api_key=config.get_api_key('chat'),
            model=config.get('chat.model', 'gemini-2.0-flash'),
            base_url=base_url,
            temperature=config.get('chat.temperature'),
        )
    if provider == 'openai':
        return OpenAIChatBackend(
            api_key=config.get_api_key('chat'),
            model=config.get('chat.model', 'gpt-4o-mini'),
            base_url=base_url,
            temperature=config.get('chat.temperature', 0.7),
        )
    raise ValueError(f"Unknown chat provider: {provider}")


def create_transcription_backend(config: DardashaConfig) -> AbstractTranscriptionBackend:
    """Create and initialize the transcription backend named by transcription.provider."""
    provider = config.get('transcription.provider', 'gemini')
    language = config.get('google_cloud.language', 'en-US')
    if provider == 'gemini':
        backend = GeminiTranscriptionBackend(
            api_key=config.get_api_key('transcription'),
            model=config.get('transcription.model', 'gemini-2.0-flash'),
            language=language,
            base_url=config.get('transcription.base_url'),
        )
    elif provider == 'google_speech':
        backend = GoogleSpeechBackend(
            credentials_path=config.get_google_credentials_path(),
            language=language,
            use_enhanced=config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=config.get('google_cloud.enable_automatic_punctuation', True),
        )
    else:
        raise ValueError(f"Unknown transcription provider: {provider}")

    if not backend.initialize():
        raise RuntimeError(f"{backend.service_name} backend failed to initialize")
    logger.info(f"✅ {backend.service_name} transcription backend initialized successfully")
    return backend


class App:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = DardashaConfig(config_path)
        # Set up logging (command line overrides config)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))

    def init(self) -> ChatSession:
        logger.info("Initializing services...")

        sample_rate = self.config.get('audio.sample_rate', 16000)
        chunk_size = self.config.get('audio.chunk_size', 1024)
        channels = self.config.get('audio.channels', 1)
        logger.info(f"Audio settings: {sample_rate}Hz, {chunk_size} samples/chunk, {channels} channels")

        notifier = Notifier()
        activity = ActivityTracker()
        transcript = Transcript()
        dispatcher = ConversationDispatcher(
            backend=create_chat_backend(self.config),
            transcript=transcript,
            activity=activity,
            notifier=notifier,
            fallback_message=self.config.get('chat.fallback_message', DEFAULT_FALLBACK_MESSAGE),
        )
        permission = MicrophonePermissionManager(
            notifier, sample_rate=sample_rate, channels=channels, chunk_size=chunk_size
        )
        recorder = AudioRecorder(
            permission,
            sample_rate=sample_rate,
            chunk_size=chunk_size,
            channels=channels,
            format_preferences=self.config.get('audio.format_preferences', DEFAULT_FORMAT_PREFERENCES),
        )
        voice = VoiceInputPipeline(
            recorder=recorder,
            encoder=AudioEncoder(),
            transcriber=TranscriptionClient(create_transcription_backend(self.config)),
            dispatcher=dispatcher,
            activity=activity,
        )
        self.session = ChatSession(
            transcript=transcript,
            activity=activity,
            notifier=notifier,
            dispatcher=dispatcher,
            permission=permission,
            voice=voice,
            attachments=FileAttachmentHandler(
                max_size_bytes=self.config.get('attachments.max_size_bytes', MAX_ATTACHMENT_BYTES)
            ),
        )

        greeting = self.config.get('chat.greeting', DEFAULT_GREETING)
        if greeting:
            transcript.append(Message(sender=Sender.AI, text=greeting))

        # Subscribes to transcript events; earlier messages are drawn when it starts
        self.screen = ChatScreen(self.session, title=self.config.get('ui.title', 'Dardasha AI'))
        return self.session

    def run(self) -> None:
        asyncio.run(self.screen.run())

    def cleanup(self) -> None:
        if getattr(self, 'screen', None):
            self.screen.close()


def setup_logging(config, level: str = "INFO") -> None:

    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/dardasha.log')
    console_output = config.get('logging.console_output', False)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config; it shares the terminal with the chat
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("Dardasha application starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def main() -> None:
    """Main entry point for Dardasha application."""
    parser = argparse.ArgumentParser(
        description="Dardasha - chat with a hosted AI model by text, file or voice",
        epilog="Commands: /mic=voice input, /attach PATH, /detach, /status, /help, /quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for dardasha.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config, else INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Dardasha v{__version__}"
    )

    args = parser.parse_args()

    app = None
    try:
        app = App(args.config, args.log_level)
        app.init()
        app.run()
    except KeyboardInterrupt:
        if app:
            app.cleanup()
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

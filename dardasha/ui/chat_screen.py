"""Rich console chat screen."""

import asyncio
import logging
import shlex
from typing import Optional

from pubsub import pub
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.chat import Message
from ..models.events import Notification, NOTIFICATION_TOPIC, TRANSCRIPT_TOPIC
from ..services.chat_session import ChatSession

logger = logging.getLogger(__name__)

COMMANDS = (
    ("/mic", "Enable the microphone, start recording, or stop and send"),
    ("/attach PATH", "Attach an image, PDF, text, JSON or CSV file (max 4 MB)"),
    ("/detach", "Remove the attached file"),
    ("/status", "Show microphone and attachment status"),
    ("/help", "Show this help"),
    ("/quit", "Exit"),
)


class ChatScreen:
    """Renders the transcript and notifications, and turns typed lines into session actions."""

    def __init__(self, session: ChatSession, console: Optional[Console] = None, title: str = "Dardasha AI"):
        self.session = session
        self.console = console or Console()
        self.title = title
        self.running = False

        pub.subscribe(self._on_message, TRANSCRIPT_TOPIC)
        pub.subscribe(self._on_notification, NOTIFICATION_TOPIC)

    def render_message(self, message: Message) -> Align:
        """Build the panel for one transcript entry."""
        body = []
        if message.file:
            icon = "🖼 " if message.file.is_image else "📎"
            body.append(Text(f"{icon} {message.file.name}", style="italic"))
        if message.text:
            body.append(Text(message.text))
        body.append(Text(message.timestamp.strftime("%H:%M"), style="dim"))

        if message.is_user:
            panel = Panel(Group(*body), title="You", title_align="right", border_style="blue", expand=False)
            return Align.right(panel)
        panel = Panel(Group(*body), title=f"🤖 {self.title}", title_align="left", border_style="green", expand=False)
        return Align.left(panel)

    def _on_message(self, message: Message) -> None:
        self.console.print(self.render_message(message))

    def _on_notification(self, notification: Notification) -> None:
        style = "bold red" if notification.is_error else "bold yellow"
        text = Text(notification.title, style=style)
        if notification.description:
            text.append(f" - {notification.description}", style="default")
        self.console.print(text)

    def show_header(self) -> None:
        self.console.print(Panel(Text(f"🤖 {self.title}", style="bold blue"), subtitle="Type /help for commands"))

    def show_help(self) -> None:
        table = Table(title="Commands", show_header=False)
        table.add_column("Command", style="bold green")
        table.add_column("Description")
        for command, description in COMMANDS:
            table.add_row(command, description)
        self.console.print(table)

    def show_status(self) -> None:
        mic = self.session.mic_button_state()
        attachment = self.session.attachments.staged
        table = Table(show_header=False)
        table.add_row("Microphone", f"{mic.icon} {mic.label}" + ("" if mic.enabled else " (unavailable)"))
        table.add_row("Activity", self.session.activity.state.value)
        table.add_row("Attachment", f"{attachment.name} ({attachment.mime_type})" if attachment else "none")
        if self.session.activity.is_recording:
            stats = self.session.voice.recorder.get_recording_stats()
            peak_bar = "█" * int(stats.peak_level * 20)
            table.add_row("Recording", f"{stats.duration_seconds:.1f}s [{peak_bar:<20}] {stats.peak_level:.3f}")
        self.console.print(table)

    def prompt(self) -> str:
        mic = self.session.mic_button_state()
        attachment = self.session.attachments.staged
        prefix = f"[{mic.icon}]"
        if attachment:
            prefix += f" [📎 {attachment.name}]"
        return f"{prefix} > "

    async def handle_command(self, line: str) -> bool:
        """Handle one typed line. Returns False to quit."""
        line = line.strip()
        if not line:
            return True

        if not line.startswith("/"):
            with self.console.status("Thinking..."):
                await self.session.submit_text(line)
            return True

        command, _, argument = line.partition(" ")
        command = command.lower()
        if command in ("/quit", "/exit", "/q"):
            return False
        if command in ("/mic", "/m"):
            if self.session.activity.is_recording:
                with self.console.status("Transcribing..."):
                    await self.session.toggle_microphone()
            else:
                await self.session.toggle_microphone()
        elif command == "/attach":
            try:
                parts = shlex.split(argument)
            except ValueError:
                parts = [argument.strip()]
            if not parts:
                self.console.print("Usage: /attach PATH", style="yellow")
            else:
                await self.session.attach(parts[0])
        elif command == "/detach":
            self.session.remove_attachment()
        elif command == "/status":
            self.show_status()
        elif command == "/help":
            self.show_help()
        else:
            self.console.print(f"Unknown command: {command}. Type /help for commands.", style="yellow")
        return True

    async def run(self) -> None:
        """Read and handle lines until the user quits."""
        self.running = True
        self.show_header()
        for message in self.session.transcript:
            self._on_message(message)

        loop = asyncio.get_running_loop()
        try:
            while self.running:
                try:
                    line = await loop.run_in_executor(None, self.console.input, self.prompt())
                except (EOFError, KeyboardInterrupt):
                    break
                if not await self.handle_command(line):
                    break
        finally:
            self.running = False
            self.close()

    def close(self) -> None:
        self.session.shutdown()
        try:
            pub.unsubscribe(self._on_message, TRANSCRIPT_TOPIC)
            pub.unsubscribe(self._on_notification, NOTIFICATION_TOPIC)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
        logger.info("Chat screen closed")

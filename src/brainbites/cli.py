"""CLI interface for Brain Bites."""

import asyncio
import logging
import time
from typing import Callable

from .catalog import PresentedQuestion, QuestionCatalog, default_sources
from .config import AppConfig, config_from_env, load_config
from .errors import StorageError
from .ledger import LedgerEvent, LedgerEventType, TimeLedger, format_time
from .logging import JSONLLogger, configure_logger, get_logger
from .session import AnswerResult, QuizSession, mascot_message
from .storage import BackgroundWriter, KeyValueStore, Preferences

logger = logging.getLogger(__name__)

BANNER = """
╔══════════════════════════════════════════╗
║            🧠 Brain Bites v0.1.0         ║
║    Answer questions, earn app time       ║
╚══════════════════════════════════════════╝

Commands:
  /play [category]  - Start a quiz (type /back to leave it)
  /categories       - List question categories
  /time             - Show your app time balance
  /spend, /stop     - Start or stop spending app time
  /reset            - Forget which questions you've seen
  /sounds on|off    - Toggle the milestone bell
  /mascot on|off    - Toggle mascot messages
  /help             - Show this help
  /exit, /quit      - Exit
"""

WELCOME_PAGES = [
    ("Welcome to Brain Bites!", "Learn while managing your screen time. Answer questions correctly to earn time for your favorite apps!"),
    ("Answer Questions", "Each correct answer gives you app time. Build a streak for bonus rewards!"),
    ("Use Your Earned Time", "Spend your earned time with /spend. When time runs out, come back to earn more!"),
]


class QuizCLI:
    """Interactive command-line front end for the quiz and the ledger."""

    def __init__(
        self,
        config: AppConfig | None = None,
        store: KeyValueStore | None = None,
        catalog: QuestionCatalog | None = None,
        ledger: TimeLedger | None = None,
        event_log: JSONLLogger | None = None,
        input_func: Callable[[str], str] = input,
    ) -> None:
        self.config = config or config_from_env(load_config())

        if store is None:
            store = KeyValueStore(self.config.db_path)
            try:
                store.init_db()
            except StorageError as e:
                logger.warning("Progress will not be saved: %s", e)
        self.store = store
        self.writer = BackgroundWriter(store)

        self.catalog = catalog or QuestionCatalog(
            store,
            sources=default_sources(self.config),
            config=self.config.catalog_config(),
            writer=self.writer,
        )
        self.ledger = ledger or TimeLedger(
            store,
            config=self.config.ledger_config(),
            writer=self.writer,
        )
        self.preferences = Preferences(store)
        self.event_log = event_log or get_logger()
        self.session = QuizSession(
            self.catalog,
            self.ledger,
            policy=self.config.reward_policy(),
            time_limit=self.config.answer_time_limit,
            event_log=self.event_log,
        )
        self._input = input_func
        self._remove_listener: Callable[[], None] | None = None

    async def start(self) -> None:
        """Load the catalog and the saved balance, and subscribe to the ledger."""
        await self.catalog.load()
        await self.ledger.load_saved_time()
        self._remove_listener = self.ledger.add_event_listener(self._on_ledger_event)
        self.event_log.set_session_id(self.session.stats.session_id)
        self.event_log.log("session_start", balance=self.ledger.balance, source=self.catalog.source_name)

    async def shutdown(self) -> None:
        """Stop spending, flush state and close the store."""
        if self._remove_listener:
            self._remove_listener()
            self._remove_listener = None
        await self.ledger.cleanup()
        await self.catalog.flush()
        stats = self.session.stats
        self.event_log.log(
            "session_end",
            balance=self.ledger.balance,
            answered=stats.answered,
            correct=stats.correct,
        )
        self.store.close()

    def _on_ledger_event(self, event: LedgerEvent) -> None:
        if event.event == LedgerEventType.EXHAUSTED:
            print("\n⏰ You're out of app time! Answer questions to earn more.")
        elif event.event == LedgerEventType.CREDITS_ADDED:
            print(f"   +{event.delta}s  (balance {format_time(event.balance)})")

    async def _read(self, prompt: str) -> str:
        """Read a line without blocking the countdown."""
        return (await asyncio.to_thread(self._input, prompt)).strip()

    def _show_welcome(self) -> None:
        for title, text in WELCOME_PAGES:
            print(f"\n★ {title}\n  {text}")
        print()
        self.preferences.onboarding_complete = True

    def _format_question(self, question: PresentedQuestion, number: int) -> str:
        """Format a question and its options for display."""
        lines = ["\n" + "─" * 40, f"Q{number}. {question.question}", ""]
        for key, text in question.options.items():
            lines.append(f"  {key}) {text}")
        lines.append("─" * 40)
        return "\n".join(lines)

    def _format_result(self, result: AnswerResult) -> str:
        """Format the outcome of an answer."""
        if result.timed_out:
            lines = ["⌛ Time's up! Let's try again."]
        elif result.correct:
            lines = [f"✅ Correct! +{result.points} points, streak {result.streak}"]
            if result.milestone:
                lines.append(f"🎉 Milestone bonus! +{format_time(result.credits)} of app time!")
            else:
                lines.append(f"+{result.credits} seconds of app time!")
        else:
            lines = [f"❌ Oops, the answer was {result.correct_answer}."]
        if result.explanation:
            lines.append(f"   {result.explanation}")
        return "\n".join(lines)

    def _format_balance(self) -> str:
        balance = self.ledger.get_available_time()
        line = f"⏱  App time: {format_time(balance)}"
        if self.ledger.is_spending:
            line += " (spending)"
        if self.preferences.mascot_enabled:
            _, message = mascot_message(balance)
            line += f"\n🐾 {message}"
        return line

    async def _play(self, category: str | None) -> None:
        """Ask questions until the player types /back."""
        number = 0
        while True:
            question = await self.session.next_question(category)
            number += 1
            print(self._format_question(question, number))

            started = time.monotonic()
            answer = await self._read(f"answer ({int(self.session.time_limit)}s)> ")
            if answer.lower() in ("/back", "back"):
                print(f"\nStreak {self.session.streak}. {self._format_balance()}")
                return

            result = self.session.answer(answer, elapsed=time.monotonic() - started)
            print(self._format_result(result))
            if result.milestone and self.preferences.sounds_enabled:
                print("\a", end="", flush=True)

    def _set_flag(self, name: str, arg: str) -> None:
        if arg not in ("on", "off"):
            print(f"Usage: /{name} on|off")
            return
        setattr(self.preferences, f"{name}_enabled", arg == "on")
        print(f"✓ {name.capitalize()} {arg}")

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        parts = command.strip().split()
        cmd = parts[0].lower() if parts else ""
        arg = parts[1].lower() if len(parts) > 1 else ""

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            return False

        if cmd == "/play":
            await self._play(arg or None)
            return True

        if cmd == "/categories":
            categories = await self.catalog.get_categories()
            counts = self.catalog.category_counts
            for name in categories:
                print(f"  • {name} ({counts.get(name, 0)})")
            return True

        if cmd == "/time":
            print(self._format_balance())
            return True

        if cmd == "/spend":
            if self.ledger.start_spending():
                self.event_log.log("spending_start", balance=self.ledger.balance)
                print(f"▶ Spending app time. {format_time(self.ledger.balance)} left.")
            elif self.ledger.is_spending:
                print("Already spending.")
            else:
                print("No app time to spend. Play a quiz first!")
            return True

        if cmd == "/stop":
            if self.ledger.stop_spending():
                self.event_log.log("spending_stop", balance=self.ledger.balance)
                print(f"⏸ Stopped. {format_time(self.ledger.balance)} left.")
            else:
                print("Not spending.")
            return True

        if cmd == "/reset":
            await self.catalog.reset_used_questions()
            print("✓ Question history cleared.")
            return True

        if cmd in ("/sounds", "/mascot"):
            self._set_flag(cmd[1:], arg)
            return True

        if cmd == "/help":
            print(BANNER)
            return True

        print(f"Unknown command: {command}. Type /help.")
        return True

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        await self.start()
        if not self.preferences.onboarding_complete:
            self._show_welcome()
        print(self._format_balance() + "\n")

        try:
            while True:
                try:
                    user_input = await self._read("brainbites> ")
                    if not user_input:
                        continue

                    if not await self._handle_command(user_input):
                        break

                except KeyboardInterrupt:
                    print("\n\n⚡ Interrupted")
                    break
                except EOFError:
                    print("\n👋 Goodbye!")
                    break
                except StorageError as e:
                    print(f"\n❌ Storage error: {e}")
                    self.event_log.log("error", error=str(e))
        finally:
            await self.shutdown()


async def run_cli() -> None:
    """Run the CLI with configuration from file and environment."""
    config = config_from_env(load_config())
    event_log = configure_logger(
        config.log_dir,
        max_size_mb=config.log_max_size_mb,
        keep_archives=config.log_keep_archives,
    )
    cli = QuizCLI(config=config, event_log=event_log)
    await cli.run()

"""
JeetAble Assistant - Main Entry Point
Interactive terminal session against a local human-like router.

    python main.py [language]
"""

import asyncio
import sys
import uuid

from jeetable.actions import PageContext
from jeetable.language import SUPPORTED_LANGUAGES, normalize_language_code
from jeetable.router import IntentRouter, Utterance
from jeetable.session_store import InMemorySessionStore


async def run(language: str) -> None:
    router = IntentRouter.assistant(InMemorySessionStore())
    session_id = f"cli-{uuid.uuid4().hex[:8]}"
    # A terminal has every capability a page could offer
    page = PageContext(has_form=True, has_search=True, has_media=True, url="/")

    while True:
        user_input = input("\nUser: ")
        if user_input.lower() in ["exit", "quit", "bye"]:
            print("Goodbye!")
            break

        if not user_input.strip():
            continue

        try:
            reply = await router.route(
                Utterance(user_input, language, language),
                session_id=session_id,
                current_url=page.url,
                page_context=page,
            )
        except Exception as e:
            print(f"Error: {e}")
            continue

        print(f"Assistant: {reply.message}")
        if reply.directive is not None:
            print(f"  → {reply.to_dict()}")


def main():
    """Main function to run the assistant."""
    language = normalize_language_code(sys.argv[1] if len(sys.argv) > 1 else "en")
    print("JeetAble Assistant\n" + "=" * 50)
    print(f"Language: {language} (supported: {', '.join(SUPPORTED_LANGUAGES)})")
    print("Type 'exit' to quit\n")
    asyncio.run(run(language))


if __name__ == "__main__":
    main()

"""Prompt templates.

Which template is used depends only on how many turns the conversation has:
a single message gets the one-shot templates, anything longer gets the
conversation templates.
"""

from typing import Dict, List

HYDE_SYSTEM_PROMPT = "You are interesting and sensational."
ANSWER_SYSTEM_PROMPT = "You are helpful and accurate."


def is_single_turn(messages: List[str]) -> bool:
    return len(messages) == 1


def hyde_messages(messages: List[str], publication_name: str) -> List[Dict[str, str]]:
    """Messages asking for a made-up article excerpt that answers the user's last question."""
    if is_single_turn(messages):
        prompt = (
            "Respond with something that sounds like it could be found in an article from "
            f"{publication_name} that would answer the following question:\n\n{messages[0]}"
        )
    else:
        conversation = "\n\n".join(messages)
        prompt = (
            "Respond with something that sounds like it could be found in an article from "
            f"{publication_name} that would answer the final question in the following:\n\n{conversation}"
        )

    return [
        {"role": "system", "content": HYDE_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def answer_messages(messages: List[str], context: str, publication_name: str, subject: str) -> List[Dict[str, str]]:
    """Messages for the streamed answer, with the selected articles as context.

    Later turns alternate assistant/user after the opening user message.
    """
    preamble = f"Some relevant articles from {publication_name}:\n\n{context}"

    if is_single_turn(messages):
        prompt = (
            f"{preamble}\n\n"
            f"Use these articles to respond to the following:\n\n{messages[0]}\n\n"
            "Cite specific articles. Phrase your responses very interestingly, including much detail, "
            f"as though you are very knowledgable about {subject}."
        )
        return [
            {"role": "system", "content": ANSWER_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    prompt = (
        f"{preamble}\n\n"
        "Use these articles for the conversation that follows. Cite specific articles. "
        "Be transparent when you can't find information on a particular topic. "
        "Phrase your responses very interestingly, including much detail, "
        f"as though you are very knowledgable about {subject}. "
        f"Here's the user's first message:\n\n{messages[0]}"
    )
    history = [
        {"role": "assistant" if index % 2 == 0 else "user", "content": message}
        for index, message in enumerate(messages[1:])
    ]
    return [
        {"role": "system", "content": ANSWER_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
        *history,
    ]

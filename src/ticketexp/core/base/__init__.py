from ticketexp.core.base.agent import Agent, Transport, normalize_uid
from ticketexp.core.base.message import Message, Result
from ticketexp.core.base.terminal import Terminal, handles

__all__ = ["Agent", "Message", "Result", "Terminal", "Transport", "handles", "normalize_uid"]

from replyflow.models.agent import Agent
from replyflow.models.channel import Channel
from replyflow.models.channel_agent_settings import ChannelAgentSettings
from replyflow.models.company import Company
from replyflow.models.contact import Contact
from replyflow.models.conversation import Conversation
from replyflow.models.knowledge import ChannelKBAssignment, KnowledgeBaseEntry
from replyflow.models.message import Message
from replyflow.models.reply_job import ReplyJob

__all__ = [
    "Company",
    "Channel",
    "Contact",
    "Conversation",
    "Message",
    "Agent",
    "ChannelAgentSettings",
    "KnowledgeBaseEntry",
    "ChannelKBAssignment",
    "ReplyJob",
]

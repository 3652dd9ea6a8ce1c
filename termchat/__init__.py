__version__ = '1.0.0'

from .user import User
from .channel import Channel, ChannelKind, ChannelStore, STATUS_CHANNEL
from .color import Palette
from .command import Command, CommandMetadata, CommandRegistry, register
from .network import NetworkClient, NetworkEvents, LoopbackClient
from .render import RenderCoordinator
from .session import Session

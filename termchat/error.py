#!/usr/bin/env python3
# -*- coding: utf-8 -*-
class TermchatError(Exception):
    ''' Base class for all exceptions in the termchat package '''

class ConfigError(TermchatError):
    ''' Exception raised when the configuration file cannot be used '''

class CommandError(TermchatError):
    ''' Exception raised by a command that failed to execute '''

class NotConnectedError(CommandError):
    ''' Exception raised when a command needs a network connection '''

class DuplicateCommandError(CommandError):
    ''' Exception raised when two commands share a name or alias '''

class ChannelError(TermchatError):
    ''' Exception raised when there is an error in the channel store '''

class RenderError(TermchatError):
    ''' Base class for all view surface faults '''

class ViewError(RenderError):
    ''' Exception raised when a view surface cannot be created or updated '''

class UnknownViewError(ViewError):
    ''' Exception raised when an operation targets a view that does not exist '''

# Copyright (C) 2024 jlsenv contributors
#
# This file is part of jlsenv.
#
# jlsenv is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# jlsenv is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with jlsenv.  If not, see <http://www.gnu.org/licenses/>.

import queue
import threading

from jlsenv import responses
from jlsenv.utils import LOGGER

INFO = 'info'
WARNING = 'warning'
ERROR = 'error'

LOMBOK_STATUS = 'lombok'

_LOG_FUNCTIONS = {
  INFO: LOGGER.info,
  WARNING: LOGGER.warning,
  ERROR: LOGGER.error,
}


class Host:
  """The user-facing capabilities of the editor that hosts us. The resolvers
  only ever talk to the user through an instance of this class, which keeps
  their decision logic independent of any particular UI.

  The default implementation just logs, and never chooses anything."""

  def Notify( self, level, message, actions = () ):
    """Show |message| to the user with severity |level| (one of INFO, WARNING,
    ERROR). |actions| is a list of button labels. Returns the label chosen by
    the user, or None."""
    _LOG_FUNCTIONS.get( level, LOGGER.info )( message )
    return None


  def PromptChoice( self, items, placeholder ):
    """Ask the user to pick one of |items| (dicts with at least a 'label').
    Returns the chosen item or None if the prompt was dismissed."""
    LOGGER.info( 'Prompt "%s" dismissed; no interactive host', placeholder )
    return None


  def TriggerReload( self ):
    """Ask the editor to reload its window, restarting the language server."""
    LOGGER.info( 'Window reload requested' )


  def SetStatusVisible( self, name, visible, text = None, command = None ):
    """Show or hide the status indicator |name|. |command| is run when the
    user clicks it."""
    LOGGER.debug( 'Status %s visible: %s (%s)', name, visible, text )


class MessageQueueHost( Host ):
  """A host whose user is on the other side of an HTTP connection. Every
  notification, reload request and status change is queued and handed to the
  client when it polls for messages.

  Prompts can't be answered synchronously over that channel, so the client
  passes its choice along with the command that needs it (see
  AnswerNextPrompt)."""

  def __init__( self, max_queued_messages = 250 ):
    self._messages = queue.Queue( maxsize = max_queued_messages )
    self._answer_lock = threading.Lock()
    self._answered_choice = None


  def Notify( self, level, message, actions = () ):
    super().Notify( level, message, actions )
    self._Enqueue( responses.BuildMessageData( level, message, actions ) )
    return None


  def PromptChoice( self, items, placeholder ):
    with self._answer_lock:
      answer, self._answered_choice = self._answered_choice, None

    if answer is None:
      return super().PromptChoice( items, placeholder )

    for item in items:
      if item[ 'label' ] == answer or item[ 'label' ] == '• ' + answer:
        return item
    LOGGER.info( 'Answer %s matches none of the choices', answer )
    return None


  def AnswerNextPrompt( self, label ):
    """Record the label the client picked for the next PromptChoice. None
    forgets any label recorded earlier."""
    with self._answer_lock:
      self._answered_choice = label


  def TriggerReload( self ):
    super().TriggerReload()
    self._Enqueue( { 'command': responses.RELOAD_WINDOW_COMMAND } )


  def SetStatusVisible( self, name, visible, text = None, command = None ):
    super().SetStatusVisible( name, visible, text, command )
    self._Enqueue( {
      'status': name,
      'visible': visible,
      'text': text,
      'command': command,
    } )


  def PendingMessages( self ):
    """Return and remove every queued message, oldest first."""
    messages = []
    try:
      while True:
        messages.append( self._messages.get_nowait() )
    except queue.Empty:
      # We drained the queue
      pass
    return messages


  def _Enqueue( self, message ):
    while True:
      try:
        self._messages.put_nowait( message )
        return
      except queue.Full:
        pass

      # The queue (ring buffer) is full. This indicates either a slow
      # consumer or that nobody polls for messages. In any case, rather than
      # infinitely queueing, discard the oldest message and try again.
      try:
        self._messages.get_nowait()
      except queue.Empty:
        pass # pragma: no cover

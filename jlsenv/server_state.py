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

import threading

from jlsenv import utils
from jlsenv.host import MessageQueueHost
from jlsenv.java.lombok_support import LombokSupport
from jlsenv.java.requirements import RequirementsResolver
from jlsenv.workspace_state import WorkspaceState


class ServerState:
  """Everything the server knows about the workspace it serves. The resolvers
  keep per-session state (cached JDKs, active Lombok jar) and are not meant to
  run concurrently, so every call goes through |Lock|."""

  def __init__( self, user_options ):
    self._user_options = user_options
    self._lock = threading.RLock()
    self._host = MessageQueueHost( user_options[ 'max_queued_messages' ] )

    project_directory = ( user_options[ 'project_directory' ] or
                          utils.GetCurrentDirectory() )
    state_root_path = user_options[ 'workspace_state_root_path' ]
    self._workspace_state = WorkspaceState(
      utils.ExpandVariablesInPath( state_root_path ),
      utils.ExpandVariablesInPath( project_directory ) )

    self._requirements = RequirementsResolver( user_options,
                                               self._workspace_state,
                                               self._host )
    self._lombok = LombokSupport( user_options,
                                  self._workspace_state,
                                  self._host )
    self._last_requirements = None


  @property
  def user_options( self ):
    return self._user_options


  @property
  def host( self ):
    return self._host


  @property
  def workspace_state( self ):
    return self._workspace_state


  @property
  def lombok( self ):
    return self._lombok


  @property
  def last_requirements( self ):
    return self._last_requirements


  def Lock( self ):
    return self._lock


  def ResolveRequirements( self ):
    with self._lock:
      self._last_requirements = self._requirements.ResolveRequirements()
      return self._last_requirements


  def ListJdks( self, force = False ):
    with self._lock:
      return self._requirements.ListJdks( force )


  def Shutdown( self ):
    # Whatever is still queued will never be polled.
    self._host.PendingMessages()

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

import hashlib
import json
import os
import threading

from jlsenv import utils
from jlsenv.utils import LOGGER

STATE_FILE_NAME = 'state.json'

DEFAULT_STATE_ROOT_PATH = os.path.join( utils.DIR_OF_THIRD_PARTY,
                                        'workspace_state' )


def StateDirForProject( state_root_path, project_dir ):
  project_dir_hash = hashlib.sha256( utils.ToBytes( project_dir ) )
  return os.path.join( state_root_path,
                       utils.ToUnicode( project_dir_hash.hexdigest() ) )


class WorkspaceState:
  """A small persistent key-value store, private to one project directory.
  Values must be JSON-encodable. The whole store is rewritten on every update,
  which is fine for the handful of keys we keep in it."""

  def __init__( self, state_root_path, project_dir ):
    self._state_dir = StateDirForProject( state_root_path or
                                            DEFAULT_STATE_ROOT_PATH,
                                          os.path.abspath( project_dir ) )
    self._state_file = os.path.join( self._state_dir, STATE_FILE_NAME )
    self._lock = threading.Lock()
    self._values = self._Load()


  @property
  def state_file( self ):
    return self._state_file


  def _Load( self ):
    if not os.path.isfile( self._state_file ):
      return {}

    try:
      values = json.loads( utils.ReadFile( self._state_file ) )
    except ( OSError, ValueError ):
      LOGGER.exception( 'Unable to read workspace state %s; starting afresh',
                        self._state_file )
      return {}

    if not isinstance( values, dict ):
      LOGGER.warning( 'Ignoring malformed workspace state %s',
                      self._state_file )
      return {}
    return values


  def Get( self, key, default = None ):
    with self._lock:
      return self._values.get( key, default )


  def Update( self, key, value ):
    """Set |key| to |value|. A value of None removes the key."""
    with self._lock:
      if value is None:
        if key not in self._values:
          return
        del self._values[ key ]
      else:
        self._values[ key ] = value

      os.makedirs( self._state_dir, exist_ok = True )
      utils.WriteFileAtomically( self._state_file,
                                 json.dumps( self._values,
                                             indent = 2,
                                             sort_keys = True ) )

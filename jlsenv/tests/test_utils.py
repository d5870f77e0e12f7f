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

from hamcrest import contains_string, has_entries, has_entry
from unittest.mock import patch
from unittest import skipIf
from webtest import TestApp
import bottle
import contextlib
import os
import shutil
import stat
import tempfile

from jlsenv import handlers, user_options_store
from jlsenv.host import Host
from jlsenv.java.java_utils import JAVA_FILENAME, JAVAC_FILENAME
from jlsenv.utils import HashableDict, OnWindows

WindowsOnly = skipIf( not OnWindows(), 'Windows only' )
UnixOnly = skipIf( OnWindows(), 'Unix only' )


def ErrorMatcher( cls, msg = None ):
  """ Returns a hamcrest matcher for a server exception response """
  entry = { 'exception': has_entry( 'TYPE', cls.__name__ ) }

  if msg:
    entry.update( { 'message': msg } )

  return has_entries( entry )


def MessageMatcher( msg ):
  return has_entry( 'message', contains_string( msg ) )


def BuildOptions( **kwargs ):
  options = user_options_store.DefaultOptions()
  options.update( kwargs )
  return HashableDict( options )


@contextlib.contextmanager
def TemporaryTestDir():
  """Context manager to execute a test with a temporary workspace area. The
  workspace is deleted upon completion of the test. The yielded path is
  already resolved, so it compares equal to the paths the runtime discovery
  returns."""
  tmp_dir = os.path.realpath( tempfile.mkdtemp() )
  try:
    yield tmp_dir
  finally:
    shutil.rmtree( tmp_dir )


def _MakeExecutable( path ):
  with open( path, 'w' ) as executable:
    executable.write( '#!/bin/sh\nexit 1\n' )
  os.chmod( path, stat.S_IRWXU )


def MakeFakeRuntime( parent,
                     name,
                     version,
                     is_jdk = True,
                     with_javac = True,
                     with_java = True ):
  """Creates a directory that looks like a Java installation: a bin directory
  with javac and java, a release file reporting |version| and, when |is_jdk|,
  the marker of a full JDK. Returns its path."""
  home = os.path.join( parent, name )
  os.makedirs( os.path.join( home, 'bin' ) )
  if with_javac:
    _MakeExecutable( os.path.join( home, 'bin', JAVAC_FILENAME ) )
  if with_java:
    _MakeExecutable( os.path.join( home, 'bin', JAVA_FILENAME ) )

  if version:
    with open( os.path.join( home, 'release' ), 'w' ) as release:
      release.write( f'IMPLEMENTOR="Test"\nJAVA_VERSION="{ version }"\n' )

  if is_jdk:
    os.makedirs( os.path.join( home, 'lib' ) )
    open( os.path.join( home, 'lib', 'jrt-fs.jar' ), 'w' ).close()
  return home


def MakeFile( *path_parts ):
  path = os.path.join( *path_parts )
  os.makedirs( os.path.dirname( path ), exist_ok = True )
  open( path, 'w' ).close()
  return path


@contextlib.contextmanager
def IsolatedEnvironment( env = {}, install_directories = () ):
  """Hide the Java installations of the machine running the tests: only the
  variables in |env| are set and only |install_directories| (a list of
  ( directory, source ) pairs) are scanned."""
  with patch.dict( os.environ, env, clear = True ):
    with patch( 'jlsenv.java.runtimes.InstallDirectories',
                return_value = list( install_directories ) ):
      yield


class RecordingHost( Host ):
  """A host that remembers everything it was asked to do. |notify_answer| and
  |prompt_answer| are the label the 'user' picks."""

  def __init__( self, notify_answer = None, prompt_answer = None ):
    self.notifications = []
    self.prompts = []
    self.statuses = []
    self.reloads = 0
    self._notify_answer = notify_answer
    self._prompt_answer = prompt_answer


  def Notify( self, level, message, actions = () ):
    self.notifications.append( ( level, message, list( actions ) ) )
    if self._notify_answer in actions:
      return self._notify_answer
    return None


  def PromptChoice( self, items, placeholder ):
    self.prompts.append( [ item[ 'label' ] for item in items ] )
    for item in items:
      if item[ 'label' ].endswith( self._prompt_answer or '\0' ):
        return item
    return None


  def TriggerReload( self ):
    self.reloads += 1


  def SetStatusVisible( self, name, visible, text = None, command = None ):
    self.statuses.append( ( name, visible, text, command ) )


  def Messages( self, level = None ):
    return [ message for notification_level, message, _
             in self.notifications
             if level is None or notification_level == level ]


def SetUpApp( custom_options = {} ):
  bottle.debug( True )
  options = user_options_store.DefaultOptions()
  options.update( custom_options )
  handlers.UpdateUserOptions( options )
  return TestApp( handlers.app )


@contextlib.contextmanager
def IsolatedApp( custom_options = {} ):
  old_server_state = handlers._server_state
  old_options = user_options_store.GetAll()
  try:
    with TemporaryTestDir() as state_dir:
      options = {
        'workspace_state_root_path': state_dir,
        'project_directory': state_dir,
      }
      options.update( custom_options )
      yield SetUpApp( options )
  finally:
    handlers._server_state = old_server_state
    user_options_store.SetAll( old_options )

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

import glob
import os

from semantic_version import Version

from jlsenv import host as host_module, responses, utils
from jlsenv.utils import DIR_OF_THIRD_PARTY, LOGGER, re

JAVA_LOMBOK_PATH = 'java.lombokPath'

LOMBOK_JAR_REGEX = re.compile( r'lombok-?\d?.*\.jar$' )
LOMBOK_AGENT_REGEX = re.compile( r'-javaagent:.*[\\/]lombok.*\.jar' )
JAVAAGENT_PREFIX = '-javaagent:'

DEFAULT_BUNDLED_LOMBOK_PATH = os.path.join( DIR_OF_THIRD_PARTY, 'lombok' )

# A jar without a version tag is assumed to be compatible so that it never
# blocks the start of the server.
UNKNOWN_VERSION = '999.999.999'
COMPATIBLE_VERSION = '1.18.0'

# Status of the Lombok indicator.
UNINITIALIZED = 'uninitialized'
ACTIVE = 'active'
CLEARED = 'cleared'

# Events emitted by CheckLombokDependency.
VERSION_CHANGED = 'version_changed'
STATUS_ACTIVATED = 'status_activated'
STATUS_CLEARED = 'status_cleared'

RELOAD_ACTION = 'Reload'

EXTENSION_ITEM_LABEL = "Use Extension's Version"
PROJECT_ITEM_LABEL = "Use Project's Version"
SELECTED_ITEM_PREFIX = '• '
CONFIGURE_PLACEHOLDER = 'Select the Lombok version used in the Java extension'


def IsLombokJar( path ):
  return bool( LOMBOK_JAR_REGEX.search( os.path.basename( path ) ) )


def IsCompatibleLombokVersion( version ):
  try:
    return Version.coerce( version ) >= Version( COMPATIBLE_VERSION )
  except ValueError:
    LOGGER.debug( 'Unparseable Lombok version %s, assuming compatible',
                  version )
    return True


class LombokSupport:
  """Decides which Lombok jar, if any, is passed to the language server as a
  javaagent, and keeps track of the Lombok jar found on the project's
  classpath.

  One instance holds the Lombok state of one workspace."""

  def __init__( self, user_options, workspace_state, host = None ):
    self._user_options = user_options
    self._workspace_state = workspace_state
    self._host = host or host_module.Host()
    self._active_path = None
    self._is_extension_lombok = False
    self._project_lombok_path = None
    self._status = UNINITIALIZED


  @property
  def active_path( self ):
    return self._active_path


  @property
  def is_extension_lombok( self ):
    return self._is_extension_lombok


  @property
  def project_lombok_path( self ):
    return self._project_lombok_path


  @property
  def status( self ):
    return self._status


  def IsLombokSupportEnabled( self ):
    return bool( self._user_options[ 'java_lombok_support_enabled' ] )


  def IsLombokImported( self ):
    return self._project_lombok_path is not None


  def IsLombokActive( self ):
    return self._active_path is not None


  def GetLombokVersion( self ):
    return self._PathToVersion( self._active_path )


  def CleanupLombokCache( self ):
    self._workspace_state.Update( JAVA_LOMBOK_PATH, None )


  def AddLombokParam( self, params ):
    """Returns a copy of the JVM arguments |params| where every Lombok
    javaagent is replaced by the one for the jar we picked. When no usable jar
    exists the copy has no Lombok javaagent at all."""
    kept = []
    last_matched_param = None
    for param in params:
      if LOMBOK_AGENT_REGEX.search( param ):
        last_matched_param = param
      else:
        kept.append( param )

    # The bundled jar is used unless a compatible one was chosen before, or
    # given by the user.
    self._is_extension_lombok = True
    lombok_jar_path = self._workspace_state.Get( JAVA_LOMBOK_PATH )
    if lombok_jar_path and not os.path.exists( lombok_jar_path ):
      LOGGER.info( 'Cached Lombok jar %s no longer exists', lombok_jar_path )
      self.CleanupLombokCache()
      lombok_jar_path = None
    if not lombok_jar_path and last_matched_param:
      lombok_jar_path = last_matched_param.replace( JAVAAGENT_PREFIX, '', 1 )

    if lombok_jar_path and os.path.exists( lombok_jar_path ):
      version = self._PathToVersionNumber( lombok_jar_path )
      if IsCompatibleLombokVersion( version ):
        self._is_extension_lombok = False
      else:
        self.CleanupLombokCache()
        fallback = self._PathToVersionNumber( self._BundledLombokPath() )
        self._Warn( f'The configured lombok { version } is not supported, '
                    f'falling back { fallback }' )

    if self._is_extension_lombok:
      lombok_jar_path = self._BundledLombokPath()

    if not lombok_jar_path:
      self._Warn( 'Could not resolve valid lombok jar from vmargs or '
                  'builtin.' )
      return kept

    kept.append( JAVAAGENT_PREFIX + lombok_jar_path )
    self._active_path = lombok_jar_path
    LOGGER.info( 'Starting server with lombok support %s', lombok_jar_path )
    return kept


  def CheckLombokDependency( self, project_classpaths ):
    """|project_classpaths| is a list with the classpath entries of each Java
    project in the workspace. Updates the Lombok status and returns the list
    of events that happened."""
    if not self.IsLombokSupportEnabled():
      return []

    events = []
    current_classpath = None
    current_version = None
    previous_version = None
    version_changed = False
    for classpaths in project_classpaths:
      current_classpath = next(
        ( classpath for classpath in classpaths if IsLombokJar( classpath ) ),
        None )
      if current_classpath:
        if self._active_path and not self._is_extension_lombok:
          current_version = self._PathToVersion( current_classpath )
          previous_version = self._PathToVersion( self._active_path )
          version_changed = current_version != previous_version
        break

    self._project_lombok_path = current_classpath

    if self._project_lombok_path and self._status != ACTIVE:
      self._status = ACTIVE
      self._host.SetStatusVisible( host_module.LOMBOK_STATUS,
                                   True,
                                   self.GetLombokVersion(),
                                   responses.LOMBOK_CONFIGURE_COMMAND )
      events.append( STATUS_ACTIVATED )
    elif not self._project_lombok_path and self._status == ACTIVE:
      self._status = CLEARED
      self._host.SetStatusVisible( host_module.LOMBOK_STATUS, False )
      self.CleanupLombokCache()
      events.append( STATUS_CLEARED )

    if version_changed:
      self._workspace_state.Update( JAVA_LOMBOK_PATH, current_classpath )
      events.append( VERSION_CHANGED )
      self._AskForReload(
        f'Lombok version changed from { _VersionTag( previous_version ) } '
        f'to { _VersionTag( current_version ) }. Do you want to reload the '
        'window to load the new Lombok version?' )

    return events


  def ConfigureLombokVersion( self ):
    """Let the user choose between the bundled jar and the project's one.
    Returns the message describing the outcome, or None when there is nothing
    to choose from or the user made no choice."""
    extension_path = self._BundledLombokPath()
    if not extension_path or not self._project_lombok_path:
      return None

    extension_label = EXTENSION_ITEM_LABEL
    project_label = PROJECT_ITEM_LABEL
    if self._is_extension_lombok:
      extension_label = SELECTED_ITEM_PREFIX + extension_label
    else:
      project_label = SELECTED_ITEM_PREFIX + project_label

    items = [
      {
        'label': extension_label,
        'description': self._PathToVersion( extension_path ),
      },
      {
        'label': project_label,
        'description': self._PathToVersion( self._project_lombok_path ),
        'detail': self._project_lombok_path,
      },
    ]
    selected = self._host.PromptChoice( items, CONFIGURE_PLACEHOLDER )
    if not selected:
      return None

    should_reload = False
    if selected[ 'label' ].endswith( EXTENSION_ITEM_LABEL ):
      if not self._is_extension_lombok:
        should_reload = True
        self.CleanupLombokCache()
    elif self._is_extension_lombok:
      project_version = self._PathToVersionNumber( self._project_lombok_path )
      if not IsCompatibleLombokVersion( project_version ):
        message = ( f"The project's Lombok version { project_version } is not "
                    'supported. Falling back to the built-in Lombok version '
                    'in the extension.' )
        self._Warn( message )
        return message
      should_reload = True
      self._workspace_state.Update( JAVA_LOMBOK_PATH,
                                    self._project_lombok_path )

    if should_reload:
      message = ( 'The Lombok version used in Java extension has changed, '
                  'please reload the window.' )
      self._AskForReload( message )
      return message

    current = "extension's" if self._is_extension_lombok else "project's"
    message = f'Current Lombok version is { current } version. Nothing to do.'
    self._host.Notify( host_module.INFO, message )
    return message


  def _BundledLombokPath( self ):
    lombok_home = ( self._user_options[ 'java_lombok_bundled_path' ] or
                    DEFAULT_BUNDLED_LOMBOK_PATH )
    lombok_home = utils.ExpandVariablesInPath( lombok_home )
    lombok_jars = sorted( glob.glob( os.path.join( glob.escape( lombok_home ),
                                                   'lombok*.jar' ) ) )
    if not lombok_jars:
      self._Warn( 'Lombok missing in extension path' )
      return None

    if not os.access( lombok_jars[ 0 ], os.R_OK ):
      self._Warn( 'Lombok found but not accessible' )
      return None

    return lombok_jars[ 0 ]


  def _PathToVersion( self, lombok_path ):
    """Returns the jar name without extension, e.g. 'lombok-1.18.30'."""
    if not lombok_path:
      return ''
    match = LOMBOK_JAR_REGEX.search( os.path.basename( lombok_path ) )
    if match:
      return match.group( 0 )[ : -len( '.jar' ) ]
    self._Warn( f'Lombok { lombok_path } jar name mismatch' )
    return 'lombok'


  def _PathToVersionNumber( self, lombok_path ):
    version_tag = self._PathToVersion( lombok_path ).split( '-', 1 )
    if len( version_tag ) > 1:
      return version_tag[ 1 ]
    self._Warn( f'Lombok { lombok_path } missing version tag' )
    return UNKNOWN_VERSION


  def _Warn( self, message ):
    self._host.Notify( host_module.WARNING, message )


  def _AskForReload( self, message ):
    if self._host.Notify( host_module.INFO,
                          message,
                          [ RELOAD_ACTION ] ) == RELOAD_ACTION:
      self._host.TriggerReload()


def _VersionTag( version ):
  return version.split( '-', 1 )[ -1 ]

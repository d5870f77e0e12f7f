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

import os

from jlsenv import host as host_module, responses, utils
from jlsenv.java import runtimes
from jlsenv.java.java_utils import ( GetJdkUrl,
                                     IsJdkHome,
                                     JAVAC_FILENAME,
                                     JavacPath )
from jlsenv.utils import LOGGER

MIN_REQUIRED_JDK_VERSION = 17
JAVAC_MIN_REQUIRED_JDK_VERSION = 23

JDTLS_JAVA_HOME_PREFERENCE = 'java.jdt.ls.java.home'
JAVA_HOME_PREFERENCE = 'java.home'

# Maps preference names to the user option holding them, in order of
# precedence.
JAVA_PREFERENCE_OPTIONS = [
  ( JDTLS_JAVA_HOME_PREFERENCE, 'java_jdtls_java_home' ),
  ( JAVA_HOME_PREFERENCE, 'java_home' ),
]

FAILS_MIN_REQUIRED_KEY = 'java.home.failsMinRequiredFirstTime'

JAVA_HOME_TOO_OLD_MESSAGE = (
  "The Java runtime set by '{0}' does not meet the minimum required version "
  "of '{1}' and will not be used." )

# Position of each origin tag when choosing between otherwise equal runtimes.
# Anything else ranks after all of these.
SOURCE_RANKING = [ runtimes.JDK_HOME, runtimes.JAVA_HOME, runtimes.PATH ]


class RequirementsData:
  """The outcome of resolving the Java requirements:
  - tooling_jre / tooling_jre_version: the runtime used to run the language
    server, always at least the required version;
  - java_home / java_version: the runtime used by default to compile the
    user's project."""

  def __init__( self,
                tooling_jre,
                tooling_jre_version,
                java_home,
                java_version ):
    self.tooling_jre = tooling_jre
    self.tooling_jre_version = tooling_jre_version
    self.java_home = java_home
    self.java_version = java_version


def RequiredJdkVersion( user_options ):
  if user_options[ 'java_jdtls_javac_enabled' ] == 'on':
    return JAVAC_MIN_REQUIRED_JDK_VERSION
  return MIN_REQUIRED_JDK_VERSION


def CheckJavaPreferences( user_options ):
  """Returns ( preference_name, java_home ) for the first Java home configured
  by the user, or ( None, None )."""
  for preference_name, option in JAVA_PREFERENCE_OPTIONS:
    java_home = user_options.get( option )
    if java_home:
      return preference_name, utils.ExpandVariablesInPath( java_home )
  return None, None


def _SourceRank( runtime ):
  for index, source in enumerate( SOURCE_RANKING ):
    if source in runtime.sources:
      return index
  return len( SOURCE_RANKING )


def SortJdksBySource( jdks ):
  # sorted() is stable, so runtimes of equal rank keep their discovery order.
  return sorted( jdks, key = _SourceRank )


def SortJdksByVersion( jdks ):
  """Sort by major version in descending order, then by origin rank."""
  return sorted( jdks, key = lambda jdk: ( -( jdk.version or 0 ),
                                          _SourceRank( jdk ) ) )


def GetMajorVersion( java_home ):
  if not java_home:
    return 0
  runtime = runtimes.GetRuntime( java_home )
  return runtime.version if runtime else 0


def _ValidateJavaHome( preference_name, java_home ):
  source = f'{ preference_name } variable defined in settings'
  if not os.path.exists( java_home ):
    raise responses.InvalidJavaHome(
      f'The { source } points to a missing or inaccessible folder '
      f'({ java_home })' )

  if not os.path.exists( JavacPath( java_home ) ):
    if os.path.exists( os.path.join( java_home, JAVAC_FILENAME ) ):
      message = f"'bin' should be removed from the { source } ({ java_home })"
    else:
      message = f'The { source } ({ java_home }) does not point to a JDK.'
    raise responses.InvalidJavaHome( message )


class RequirementsResolver:
  """Works out which Java runtimes to use. One instance lives as long as the
  workspace it was created for, and caches the list of JDKs found on the
  machine."""

  def __init__( self, user_options, workspace_state, host = None ):
    self._user_options = user_options
    self._workspace_state = workspace_state
    self._host = host or host_module.Host()
    self._cached_jdks = None


  def ResolveRequirements( self ):
    """Returns a RequirementsData. Raises a JavaRequirementError when no
    suitable runtime exists, in which case the language server must not be
    started."""
    required_jdk_version = RequiredJdkVersion( self._user_options )

    tooling_jre, tooling_jre_version = self._EmbeddedJre(
      required_jdk_version )

    preference_name, java_home = CheckJavaPreferences( self._user_options )
    java_version = 0
    if java_home:
      _ValidateJavaHome( preference_name, java_home )
      java_version = GetMajorVersion( java_home )
      if ( preference_name == JDTLS_JAVA_HOME_PREFERENCE or
           not tooling_jre ):
        if java_version >= required_jdk_version:
          tooling_jre = java_home
          tooling_jre_version = java_version
        else:
          self._WarnJavaHomeTooOld( preference_name, required_jdk_version )

    # Search for JDKs in JDK_HOME, JAVA_HOME, PATH, SDKMAN, jEnv, jabba, asdf
    # and the common install directories.
    java_runtimes = runtimes.FindRuntimes()

    if not tooling_jre:
      # As recent a version as possible.
      valid_jdks = [ jdk for jdk in SortJdksByVersion( java_runtimes )
                     if jdk.version >= required_jdk_version ]
      if valid_jdks:
        best = valid_jdks[ 0 ]
        tooling_jre = best.homedir
        tooling_jre_version = best.version
        LOGGER.info( 'Use the JDK from %s to run the language server',
                     best.homedir )

    if not tooling_jre or tooling_jre_version < required_jdk_version:
      raise responses.NoCompatibleJdk(
        responses.TOOLING_JDK_TOO_OLD_MESSAGE.format( required_jdk_version ),
        GetJdkUrl() )

    # For legacy users, we implicitly follow the order below to pick the
    # initial default project JDK:
    # java.jdt.ls.java.home > java.home > env.JDK_HOME > env.JAVA_HOME >
    # env.PATH > java.configuration.runtimes
    if java_home:
      LOGGER.info( "Use the JDK from '%s' setting as the initial default "
                   "project JDK.", preference_name )
    elif java_runtimes:
      first = SortJdksBySource( java_runtimes )[ 0 ]
      java_home = first.homedir
      java_version = first.version
      LOGGER.info( "Use the JDK from '%s' as the initial default project "
                   "JDK.", ', '.join( runtimes.GetSources( first ) ) )
    else:
      runtime = self._FindDefaultRuntimeFromSettings()
      if not runtime:
        raise responses.NoCompatibleJdk( responses.NO_PROJECT_JDK_MESSAGE,
                                         GetJdkUrl() )
      java_home = runtime.homedir
      java_version = runtime.version
      LOGGER.info( "Use the JDK from 'java.configuration.runtimes' as the "
                   "initial default project JDK." )

    return RequirementsData( tooling_jre,
                             tooling_jre_version,
                             java_home,
                             java_version )


  def ListJdks( self, force = False ):
    """Returns the full JDKs (not mere JREs) on this machine. The scan is done
    once and cached unless |force| is set."""
    if force or self._cached_jdks is None:
      self._cached_jdks = [ jdk for jdk in runtimes.FindRuntimes()
                            if IsJdkHome( jdk.homedir ) ]

    return list( self._cached_jdks )


  def _EmbeddedJre( self, required_jdk_version ):
    """Returns ( path, major version ) of the embedded JRE, or ( None, 0 ) when
    there is none usable to run the language server."""
    embedded_jre = self._user_options[ 'java_embedded_jre_path' ]
    if not embedded_jre:
      return None, 0

    embedded_jre = utils.ExpandVariablesInPath( embedded_jre )
    if not os.path.isdir( embedded_jre ):
      LOGGER.info( 'Embedded JRE %s does not exist', embedded_jre )
      return None, 0

    runtime = runtimes.GetRuntime( embedded_jre, check_javac = False )
    if not runtime:
      LOGGER.info( 'No Java runtime in embedded JRE %s', embedded_jre )
      return None, 0

    if runtime.version < required_jdk_version:
      LOGGER.info( 'Embedded JRE %s is Java %d, %d is required',
                   embedded_jre,
                   runtime.version,
                   required_jdk_version )
      return None, 0
    return embedded_jre, runtime.version


  def _WarnJavaHomeTooOld( self, preference_name, required_jdk_version ):
    message = JAVA_HOME_TOO_OLD_MESSAGE.format( preference_name,
                                                required_jdk_version )
    LOGGER.info( message )
    if self._workspace_state.Get( FAILS_MIN_REQUIRED_KEY ):
      return
    self._workspace_state.Update( FAILS_MIN_REQUIRED_KEY, True )
    self._host.Notify( host_module.INFO, message )


  def _FindDefaultRuntimeFromSettings( self ):
    configured = self._user_options[ 'java_configuration_runtimes' ]
    if not isinstance( configured, list ):
      return None

    candidate = None
    for entry in configured:
      if not isinstance( entry, dict ) or not entry.get( 'path' ):
        continue

      runtime = runtimes.GetRuntime( entry[ 'path' ],
                                     sources = [ runtimes.SETTINGS ] )
      if not runtime:
        LOGGER.debug( 'Ignoring runtime %s: no JDK at %s',
                      entry.get( 'name' ),
                      entry[ 'path' ] )
        continue

      if entry.get( 'default' ):
        return runtime
      if candidate is None:
        candidate = runtime

    return candidate

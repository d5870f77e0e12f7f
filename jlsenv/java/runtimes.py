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
import subprocess

from jlsenv import utils
from jlsenv.java.java_utils import ( JavacPath,
                                     JavaPath,
                                     JAVAC_FILENAME,
                                     ParseMajorVersion )
from jlsenv.utils import LOGGER, re

# Origin tags. A runtime found by more than one route carries all of them.
JDK_HOME = 'JDK_HOME'
JAVA_HOME = 'JAVA_HOME'
PATH = 'PATH'
SETTINGS = 'SETTINGS'
SDKMAN = 'SDKMAN'
JENV = 'jEnv'
JABBA = 'jabba'
ASDF = 'asdf'

ENVIRONMENT_SOURCES = [ JDK_HOME, JAVA_HOME ]

RELEASE_VERSION_REGEX = re.compile( r'^JAVA_VERSION="?([^"\s]+)"?\s*$',
                                    re.MULTILINE )
# Matches both `javac 17.0.2` and `openjdk version "17.0.2" 2022-01-18`.
EXECUTABLE_VERSION_REGEX = re.compile( r'(?:javac\s+|version\s+")([^"\s]+)' )


class JavaRuntime:
  """A Java installation found on this machine. |version| is the major version
  (0 when it could not be determined) and |sources| the set of origin tags
  that led to it."""

  def __init__( self, homedir, version = 0, full_version = '', sources = () ):
    self.homedir = homedir
    self.version = version
    self.full_version = full_version
    self.sources = frozenset( sources )


  def WithSources( self, sources ):
    return JavaRuntime( self.homedir,
                        self.version,
                        self.full_version,
                        self.sources.union( sources ) )


  def __eq__( self, other ):
    return ( isinstance( other, JavaRuntime ) and
             self.homedir == other.homedir and
             self.version == other.version and
             self.sources == other.sources )


  def __hash__( self ):
    return hash( ( self.homedir, self.version, self.sources ) )


  def __repr__( self ):
    return ( f'JavaRuntime( { self.homedir }, { self.version }, '
             f'{ sorted( self.sources ) } )' )


def _ReadReleaseVersion( java_home ):
  release_file = os.path.join( java_home, 'release' )
  if not os.path.isfile( release_file ):
    return None

  try:
    match = RELEASE_VERSION_REGEX.search( utils.ReadFile( release_file ) )
  except OSError:
    LOGGER.exception( 'Unable to read %s', release_file )
    return None
  return match.group( 1 ) if match else None


def _ProbeExecutableVersion( executable ):
  try:
    handle = utils.SafePopen( [ executable, '-version' ],
                              stdin = subprocess.DEVNULL,
                              stdout = subprocess.PIPE,
                              stderr = subprocess.PIPE )
    stdout, stderr = handle.communicate()
  except OSError:
    LOGGER.exception( 'Unable to run %s', executable )
    return None

  # Java 8 and older print the version on stderr.
  output = utils.ToUnicode( stdout ) + utils.ToUnicode( stderr )
  match = EXECUTABLE_VERSION_REGEX.search( output )
  return match.group( 1 ) if match else None


def GetJavaVersion( executable, java_home ):
  """Returns the full version string of the runtime at |java_home|, or None.
  |executable| is the java or javac binary to ask when the runtime has no
  release file."""
  version = _ReadReleaseVersion( java_home )
  if version:
    return version
  return _ProbeExecutableVersion( executable )


def GetRuntime( java_home,
                with_version = True,
                sources = (),
                check_javac = True ):
  """Returns a JavaRuntime for the directory |java_home| or None if it doesn't
  contain a javac executable (or, when |check_javac| is False, a java
  executable)."""
  if not java_home:
    return None

  homedir = os.path.realpath( utils.ExpandVariablesInPath( java_home ) )
  executable = utils.GetExecutable( JavacPath( homedir ) if check_javac
                                    else JavaPath( homedir ) )
  if not executable:
    LOGGER.debug( 'No runtime in %s', homedir )
    return None

  if not with_version:
    return JavaRuntime( homedir, sources = sources )

  full_version = GetJavaVersion( executable, homedir ) or ''
  return JavaRuntime( homedir,
                      ParseMajorVersion( full_version ),
                      full_version,
                      sources )


def _HomeFromJavac( javac ):
  # <home>/bin/javac, possibly through a chain of symlinks such as
  # /usr/bin/javac -> /etc/alternatives/javac -> /usr/lib/jvm/.../bin/javac
  return os.path.dirname( os.path.dirname( os.path.realpath( javac ) ) )


def InstallDirectories():
  """Returns a list of ( directory, source ) pairs. Every subdirectory of
  |directory| is a candidate Java home; |source| is the origin tag to give it,
  or None."""
  home = os.path.expanduser( '~' )
  directories = [
    ( os.path.join( home, '.sdkman', 'candidates', 'java' ), SDKMAN ),
    ( os.path.join( home, '.jenv', 'versions' ), JENV ),
    ( os.path.join( home, '.jabba', 'jdk' ), JABBA ),
    ( os.path.join( home, '.asdf', 'installs', 'java' ), ASDF ),
    ( os.path.join( home, '.jdks' ), None ),
  ]

  if utils.OnWindows():
    program_files = os.environ.get( 'ProgramFiles', r'C:\Program Files' )
    for vendor in [ 'Java',
                    'Eclipse Adoptium',
                    'Eclipse Foundation',
                    'AdoptOpenJDK',
                    'Microsoft',
                    'Zulu',
                    'BellSoft' ]:
      directories.append( ( os.path.join( program_files, vendor ), None ) )
  elif utils.OnMac():
    directories.extend( [
      ( '/Library/Java/JavaVirtualMachines', None ),
      ( os.path.join( home, 'Library', 'Java', 'JavaVirtualMachines' ), None ),
    ] )
  else:
    directories.extend( [
      ( '/usr/lib/jvm', None ),
      ( '/usr/java', None ),
      ( '/opt/java', None ),
    ] )

  return directories


def _CandidatesFromEnvironment():
  for name in ENVIRONMENT_SOURCES:
    value = os.environ.get( name )
    if value:
      yield value, name


def _CandidatesFromPath():
  for path in utils.PathEntries():
    javac = utils.GetExecutable( os.path.join( path, JAVAC_FILENAME ) )
    if javac:
      yield _HomeFromJavac( javac ), PATH


def _CandidatesFromInstallDirectories():
  for directory, source in InstallDirectories():
    if not os.path.isdir( directory ):
      continue

    for entry in sorted( utils.ListDirectory( directory ) ):
      candidate = os.path.join( directory, entry )
      # macOS bundles keep the actual home a few levels down.
      bundle_home = os.path.join( candidate, 'Contents', 'Home' )
      if os.path.isdir( bundle_home ):
        candidate = bundle_home
      yield candidate, source


def _Candidates():
  yield from _CandidatesFromEnvironment()
  yield from _CandidatesFromPath()
  yield from _CandidatesFromInstallDirectories()


def FindRuntimes( with_version = True ):
  """Scans the environment, PATH and the usual install locations for Java
  runtimes with a javac. The result is in discovery order: JDK_HOME,
  JAVA_HOME, PATH, then install directories. A runtime found more than once is
  listed once, at its first position, with the union of its origin tags."""
  runtimes = []
  index_by_home = {}

  for candidate, source in _Candidates():
    sources = [ source ] if source else []
    homedir = os.path.realpath( utils.ExpandVariablesInPath( candidate ) )

    if homedir in index_by_home:
      index = index_by_home[ homedir ]
      runtimes[ index ] = runtimes[ index ].WithSources( sources )
      continue

    runtime = GetRuntime( homedir, with_version, sources )
    if not runtime:
      continue

    LOGGER.debug( 'Found %s', runtime )
    index_by_home[ homedir ] = len( runtimes )
    runtimes.append( runtime )

  LOGGER.info( 'Found %d Java runtimes', len( runtimes ) )
  return runtimes


def GetSources( runtime ):
  """Returns the origin tags of |runtime| in rank order, for display."""
  ranked = [ source for source in ENVIRONMENT_SOURCES + [ PATH ]
             if source in runtime.sources ]
  return ranked + sorted( runtime.sources.difference( ranked ) )

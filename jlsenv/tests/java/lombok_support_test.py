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

from hamcrest import ( assert_that,
                       contains_exactly,
                       contains_string,
                       empty,
                       equal_to,
                       has_item,
                       none )
from unittest import TestCase
import contextlib
import os

from jlsenv import host, responses
from jlsenv.java import lombok_support
from jlsenv.java.lombok_support import LombokSupport
from jlsenv.tests.test_utils import ( BuildOptions,
                                      MakeFile,
                                      RecordingHost,
                                      TemporaryTestDir )
from jlsenv.workspace_state import WorkspaceState

BUNDLED_JAR = 'lombok-1.18.30.jar'
CONFIGURE_COMMAND = responses.LOMBOK_CONFIGURE_COMMAND


class LombokTestContext:
  def __init__( self, tmp_dir, host, **options ):
    self.tmp_dir = tmp_dir
    self.host = host
    self.bundled_dir = os.path.join( tmp_dir, 'bundled' )
    self.state = WorkspaceState( os.path.join( tmp_dir, 'state' ), tmp_dir )
    options.setdefault( 'java_lombok_bundled_path', self.bundled_dir )
    self.lombok = LombokSupport( BuildOptions( **options ), self.state, host )


  def Jar( self, *path_parts ):
    return MakeFile( self.tmp_dir, *path_parts )


  @property
  def bundled_jar( self ):
    return os.path.join( self.bundled_dir, BUNDLED_JAR )


@contextlib.contextmanager
def Lombok( with_bundled_jar = True, host = None, **options ):
  with TemporaryTestDir() as tmp_dir:
    context = LombokTestContext( tmp_dir, host or RecordingHost(), **options )
    if with_bundled_jar:
      MakeFile( context.bundled_jar )
    yield context


class LombokVersionTest( TestCase ):
  def test_IsCompatibleLombokVersion( self ):
    for version, compatible in [ ( '1.18.0', True ),
                                 ( '1.18.30', True ),
                                 ( '1.16.22', False ),
                                 ( '0.9', False ),
                                 ( lombok_support.UNKNOWN_VERSION, True ),
                                 ( 'edge', True ) ]:
      with self.subTest( version = version ):
        assert_that( lombok_support.IsCompatibleLombokVersion( version ),
                     equal_to( compatible ) )


  def test_IsLombokJar( self ):
    assert_that( lombok_support.IsLombokJar( '/m2/lombok-1.18.30.jar' ),
                 equal_to( True ) )
    assert_that( lombok_support.IsLombokJar( '/m2/lombok.jar' ),
                 equal_to( True ) )
    assert_that( lombok_support.IsLombokJar( '/lombok/guava-31.jar' ),
                 equal_to( False ) )
    assert_that( lombok_support.IsLombokJar( '/m2/lombok-1.18.30.pom' ),
                 equal_to( False ) )


class AddLombokParamTest( TestCase ):
  def test_AddLombokParam_Bundled( self ):
    with Lombok() as context:
      params = context.lombok.AddLombokParam( [ '-Xmx1G' ] )
      assert_that( params, contains_exactly(
        '-Xmx1G', '-javaagent:' + context.bundled_jar ) )
      assert_that( context.lombok.is_extension_lombok, equal_to( True ) )
      assert_that( context.lombok.active_path,
                   equal_to( context.bundled_jar ) )
      assert_that( context.lombok.IsLombokActive(), equal_to( True ) )
      assert_that( context.lombok.GetLombokVersion(),
                   equal_to( 'lombok-1.18.30' ) )


  def test_AddLombokParam_DoesNotModifyArguments( self ):
    with Lombok() as context:
      params = [ '-Xmx1G' ]
      context.lombok.AddLombokParam( params )
      assert_that( params, contains_exactly( '-Xmx1G' ) )


  def test_AddLombokParam_CachedCompatible( self ):
    with Lombok() as context:
      cached = context.Jar( 'm2', 'lombok-1.18.30.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, cached )

      params = context.lombok.AddLombokParam( [] )
      assert_that( params, contains_exactly( '-javaagent:' + cached ) )
      assert_that( context.lombok.is_extension_lombok, equal_to( False ) )
      assert_that( context.lombok.active_path, equal_to( cached ) )


  def test_AddLombokParam_CachedIncompatible( self ):
    with Lombok() as context:
      cached = context.Jar( 'm2', 'lombok-1.17.0.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, cached )

      params = context.lombok.AddLombokParam( [] )
      assert_that( params,
                   contains_exactly( '-javaagent:' + context.bundled_jar ) )
      assert_that( context.lombok.is_extension_lombok, equal_to( True ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   none() )
      assert_that( context.host.Messages( host.WARNING ), contains_exactly(
        'The configured lombok 1.17.0 is not supported, falling back 1.18.30'
      ) )


  def test_AddLombokParam_ConflictingAgents( self ):
    with Lombok() as context:
      first = context.Jar( 'first', 'lombok-1.18.20.jar' )
      last = context.Jar( 'last', 'lombok-1.18.24.jar' )

      params = context.lombok.AddLombokParam( [ '-javaagent:' + first,
                                                '-Xmx1G',
                                                '-javaagent:' + last ] )
      assert_that( params,
                   contains_exactly( '-Xmx1G', '-javaagent:' + last ) )
      assert_that( context.lombok.is_extension_lombok, equal_to( False ) )


  def test_AddLombokParam_CacheWinsOverAgent( self ):
    with Lombok() as context:
      cached = context.Jar( 'm2', 'lombok-1.18.32.jar' )
      agent = context.Jar( 'lib', 'lombok-1.18.24.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, cached )

      params = context.lombok.AddLombokParam( [ '-javaagent:' + agent ] )
      assert_that( params, contains_exactly( '-javaagent:' + cached ) )


  def test_AddLombokParam_CachedJarDeleted( self ):
    with Lombok() as context:
      deleted = os.path.join( context.tmp_dir, 'm2', 'lombok-1.18.30.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, deleted )

      params = context.lombok.AddLombokParam( [] )
      assert_that( params,
                   contains_exactly( '-javaagent:' + context.bundled_jar ) )
      assert_that( context.lombok.is_extension_lombok, equal_to( True ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   none() )


  def test_AddLombokParam_AgentDoesNotExist( self ):
    with Lombok() as context:
      missing = os.path.join( context.tmp_dir, 'lib', 'lombok-1.18.24.jar' )

      params = context.lombok.AddLombokParam( [ '-javaagent:' + missing ] )
      assert_that( params,
                   contains_exactly( '-javaagent:' + context.bundled_jar ) )
      assert_that( context.lombok.is_extension_lombok, equal_to( True ) )


  def test_AddLombokParam_OtherAgentsKept( self ):
    with Lombok() as context:
      params = context.lombok.AddLombokParam( [ '-javaagent:/opt/jacoco.jar' ] )
      assert_that( params, contains_exactly(
        '-javaagent:/opt/jacoco.jar', '-javaagent:' + context.bundled_jar ) )


  def test_AddLombokParam_NothingUsable( self ):
    with Lombok( with_bundled_jar = False ) as context:
      params = context.lombok.AddLombokParam( [ '-Xmx1G' ] )
      assert_that( params, contains_exactly( '-Xmx1G' ) )
      assert_that( context.lombok.IsLombokActive(), equal_to( False ) )
      assert_that( context.host.Messages( host.WARNING ), contains_exactly(
        'Lombok missing in extension path',
        'Could not resolve valid lombok jar from vmargs or builtin.' ) )


  def test_AddLombokParam_MissingVersionTag( self ):
    with Lombok() as context:
      cached = context.Jar( 'm2', 'lombok.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, cached )

      params = context.lombok.AddLombokParam( [] )
      assert_that( params, contains_exactly( '-javaagent:' + cached ) )
      assert_that( context.host.Messages( host.WARNING ), contains_exactly(
        contains_string( 'missing version tag' ) ) )


class CheckLombokDependencyTest( TestCase ):
  def test_CheckLombokDependency_Disabled( self ):
    with Lombok( java_lombok_support_enabled = False ) as context:
      jar = context.Jar( 'm2', 'lombok-1.18.30.jar' )
      assert_that( context.lombok.CheckLombokDependency( [ [ jar ] ] ),
                   empty() )
      assert_that( context.lombok.status,
                   equal_to( lombok_support.UNINITIALIZED ) )
      assert_that( context.host.statuses, empty() )


  def test_CheckLombokDependency_StatusLifecycle( self ):
    with Lombok() as context:
      lombok = context.lombok
      lombok.AddLombokParam( [] )
      jar = context.Jar( 'm2', 'lombok-1.18.30.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, jar )

      assert_that( lombok.CheckLombokDependency( [ [ '/m2/guava.jar' ],
                                                   [ jar ] ] ),
                   contains_exactly( lombok_support.STATUS_ACTIVATED ) )
      assert_that( lombok.status, equal_to( lombok_support.ACTIVE ) )
      assert_that( lombok.IsLombokImported(), equal_to( True ) )
      assert_that( lombok.project_lombok_path, equal_to( jar ) )

      # Still there: nothing happens.
      assert_that( lombok.CheckLombokDependency( [ [ jar ] ] ), empty() )

      assert_that( lombok.CheckLombokDependency( [ [ '/m2/guava.jar' ] ] ),
                   contains_exactly( lombok_support.STATUS_CLEARED ) )
      assert_that( lombok.status, equal_to( lombok_support.CLEARED ) )
      assert_that( lombok.IsLombokImported(), equal_to( False ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   none() )

      assert_that( lombok.CheckLombokDependency( [ [ jar ] ] ),
                   contains_exactly( lombok_support.STATUS_ACTIVATED ) )

      assert_that( context.host.statuses, contains_exactly(
        ( host.LOMBOK_STATUS, True, 'lombok-1.18.30', CONFIGURE_COMMAND ),
        ( host.LOMBOK_STATUS, False, None, None ),
        ( host.LOMBOK_STATUS, True, 'lombok-1.18.30', CONFIGURE_COMMAND ),
      ) )


  def test_CheckLombokDependency_NoJarNeverInitialized( self ):
    with Lombok() as context:
      assert_that( context.lombok.CheckLombokDependency( [ [], [] ] ),
                   empty() )
      assert_that( context.lombok.status,
                   equal_to( lombok_support.UNINITIALIZED ) )


  def test_CheckLombokDependency_VersionChanged( self ):
    with Lombok( host = RecordingHost( notify_answer = 'Reload' ) ) as context:
      old = context.Jar( 'm2', '1.18.20', 'lombok-1.18.20.jar' )
      new = context.Jar( 'm2', '1.18.30', 'lombok-1.18.30.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, old )
      context.lombok.AddLombokParam( [] )

      events = context.lombok.CheckLombokDependency( [ [ new ] ] )
      assert_that( events, has_item( lombok_support.VERSION_CHANGED ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   equal_to( new ) )
      assert_that( context.host.Messages( host.INFO ), contains_exactly(
        contains_string( 'Lombok version changed from 1.18.20 to 1.18.30' ) ) )
      assert_that( context.host.reloads, equal_to( 1 ) )


  def test_CheckLombokDependency_VersionChangedReloadDeclined( self ):
    with Lombok() as context:
      old = context.Jar( 'm2', 'lombok-1.18.20.jar' )
      new = context.Jar( 'm2', 'lombok-1.18.30.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, old )
      context.lombok.AddLombokParam( [] )

      assert_that( context.lombok.CheckLombokDependency( [ [ new ] ] ),
                   has_item( lombok_support.VERSION_CHANGED ) )
      assert_that( context.host.reloads, equal_to( 0 ) )


  def test_CheckLombokDependency_BundledIgnoresVersion( self ):
    with Lombok() as context:
      context.lombok.AddLombokParam( [] )
      project_jar = context.Jar( 'm2', 'lombok-1.18.20.jar' )

      assert_that( context.lombok.CheckLombokDependency( [ [ project_jar ] ] ),
                   contains_exactly( lombok_support.STATUS_ACTIVATED ) )
      assert_that( context.host.reloads, equal_to( 0 ) )


class ConfigureLombokVersionTest( TestCase ):
  def test_ConfigureLombokVersion_NoProjectLombok( self ):
    with Lombok( host = RecordingHost( prompt_answer = 'x' ) ) as context:
      context.lombok.AddLombokParam( [] )
      assert_that( context.lombok.ConfigureLombokVersion(), none() )
      assert_that( context.host.prompts, empty() )


  def test_ConfigureLombokVersion_Dismissed( self ):
    with Lombok() as context:
      context.lombok.AddLombokParam( [] )
      context.lombok.CheckLombokDependency( [
        [ context.Jar( 'm2', 'lombok-1.18.32.jar' ) ] ] )
      assert_that( context.lombok.ConfigureLombokVersion(), none() )
      assert_that( context.host.prompts, contains_exactly( [
        "• Use Extension's Version", "Use Project's Version" ] ) )


  def test_ConfigureLombokVersion_SwitchToProject( self ):
    recording_host = RecordingHost( prompt_answer = "Use Project's Version" )
    with Lombok( host = recording_host ) as context:
      project_jar = context.Jar( 'm2', 'lombok-1.18.32.jar' )
      context.lombok.AddLombokParam( [] )
      context.lombok.CheckLombokDependency( [ [ project_jar ] ] )

      assert_that( context.lombok.ConfigureLombokVersion(),
                   contains_string( 'please reload the window' ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   equal_to( project_jar ) )


  def test_ConfigureLombokVersion_ProjectIncompatible( self ):
    recording_host = RecordingHost( prompt_answer = "Use Project's Version" )
    with Lombok( host = recording_host ) as context:
      project_jar = context.Jar( 'm2', 'lombok-1.16.22.jar' )
      context.lombok.AddLombokParam( [] )
      context.lombok.CheckLombokDependency( [ [ project_jar ] ] )

      assert_that( context.lombok.ConfigureLombokVersion(),
                   contains_string( "The project's Lombok version 1.16.22 is "
                                    "not supported" ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   none() )


  def test_ConfigureLombokVersion_SwitchToExtension( self ):
    recording_host = RecordingHost( prompt_answer = "Use Extension's Version" )
    with Lombok( host = recording_host ) as context:
      project_jar = context.Jar( 'm2', 'lombok-1.18.32.jar' )
      context.state.Update( lombok_support.JAVA_LOMBOK_PATH, project_jar )
      context.lombok.AddLombokParam( [] )
      context.lombok.CheckLombokDependency( [ [ project_jar ] ] )

      assert_that( context.lombok.ConfigureLombokVersion(),
                   contains_string( 'please reload the window' ) )
      assert_that( context.state.Get( lombok_support.JAVA_LOMBOK_PATH ),
                   none() )
      assert_that( recording_host.prompts, contains_exactly( [
        "Use Extension's Version", "• Use Project's Version" ] ) )


  def test_ConfigureLombokVersion_NothingToDo( self ):
    recording_host = RecordingHost( prompt_answer = "Use Extension's Version" )
    with Lombok( host = recording_host ) as context:
      context.lombok.AddLombokParam( [] )
      context.lombok.CheckLombokDependency( [
        [ context.Jar( 'm2', 'lombok-1.18.32.jar' ) ] ] )

      assert_that( context.lombok.ConfigureLombokVersion(),
                   equal_to( "Current Lombok version is extension's version. "
                             "Nothing to do." ) )
      assert_that( recording_host.reloads, equal_to( 0 ) )

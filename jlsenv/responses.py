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

# Commands the client knows how to execute. They are attached to failures and
# messages so that the editor can offer a remediation button.
OPEN_BROWSER_COMMAND = 'java.open.browser'
OPEN_JSON_SETTINGS_COMMAND = 'java.open.json.settings'
RELOAD_WINDOW_COMMAND = 'workbench.action.reloadWindow'
LOMBOK_CONFIGURE_COMMAND = 'java.lombokConfigure'

GET_JDK_LABEL = 'Get the Java Development Kit'
OPEN_SETTINGS_LABEL = 'Open settings'

RUNTIMES_SETTING_LINK = (
  "['java.configuration.runtimes']"
  '(https://github.com/redhat-developer/vscode-java/wiki/JDK-Requirements'
  '#java.configuration.runtimes)' )

TOOLING_JDK_TOO_OLD_MESSAGE = (
  'Java {0} or more recent is required to run the Java extension. Please '
  'download and install a recent JDK. You can still compile your projects '
  'with older JDKs by configuring ' + RUNTIMES_SETTING_LINK )

NO_PROJECT_JDK_MESSAGE = (
  'Please download and install a JDK to compile your project. You can '
  'configure your projects with different JDKs by the setting '
  + RUNTIMES_SETTING_LINK )


class ServerError( Exception ):
  def __init__( self, message ):
    super().__init__( message )


class JavaRequirementError( ServerError ):
  """Resolution of the Java requirements cannot proceed. |label|, |command|
  and |command_param| describe an optional remediation the client can offer to
  the user; the caller is expected to halt startup."""

  def __init__( self,
                message,
                label = None,
                command = None,
                command_param = None ):
    super().__init__( message )
    self.label = label
    self.command = command
    self.command_param = command_param


class NoCompatibleJdk( JavaRequirementError ):
  def __init__( self, message, jdk_url ):
    super().__init__( message,
                      label = GET_JDK_LABEL,
                      command = OPEN_BROWSER_COMMAND,
                      command_param = jdk_url )


class InvalidJavaHome( JavaRequirementError ):
  def __init__( self, message ):
    if 'java.home' in message:
      super().__init__( message,
                        label = OPEN_SETTINGS_LABEL,
                        command = OPEN_JSON_SETTINGS_COMMAND )
    else:
      super().__init__( message )


def BuildDisplayMessageResponse( text ):
  return {
    'message': text
  }


def BuildMessageData( level, text, actions = () ):
  return {
    'level': level,
    'message': text,
    'actions': list( actions ),
  }


def BuildRuntimeData( runtime ):
  return {
    'homedir': runtime.homedir,
    'version': runtime.version,
    'full_version': runtime.full_version,
    'sources': sorted( runtime.sources ),
  }


def BuildRequirementsResponse( requirements ):
  return {
    'tooling_jre': requirements.tooling_jre,
    'tooling_jre_version': requirements.tooling_jre_version,
    'java_home': requirements.java_home,
    'java_version': requirements.java_version,
  }


def BuildExceptionResponse( exception, traceback ):
  return {
    'exception': exception,
    'message': str( exception ),
    'traceback': traceback
  }


class DebugInfoItem:

  def __init__( self, key, value ):
    self.key = key
    self.value = value


def BuildDebugInfoResponse( name, items = [] ):
  """Build a response containing debugging information:
  - name: the name of the component;
  - items: a list of DebugInfoItem objects for additional information
    on the component."""

  def BuildItemData( item ):
    return {
      'key': item.key,
      'value': item.value
    }


  return {
    'name': name,
    'items': [ BuildItemData( item ) for item in items ]
  }

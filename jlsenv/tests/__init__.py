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

import functools
import tempfile
from jlsenv.tests.test_utils import IsolatedApp, SetUpApp

shared_app = None


def SharedJlsenv( test ):
  global shared_app
  if shared_app is None:
    state_dir = tempfile.mkdtemp( prefix = 'jlsenv_shared_' )
    shared_app = SetUpApp( {
      'workspace_state_root_path': state_dir,
      'project_directory': state_dir,
    } )

  @functools.wraps( test )
  def Wrapper( test_case_instance, *args, **kwargs ):
    return test( test_case_instance, shared_app, *args, **kwargs )
  return Wrapper


def IsolatedJlsenv( custom_options = {} ):
  def Decorator( test ):
    @functools.wraps( test )
    def Wrapper( test_case_instance, *args, **kwargs ):
      with IsolatedApp( custom_options ) as app:
        test( test_case_instance, app, *args, **kwargs )
    return Wrapper
  return Decorator

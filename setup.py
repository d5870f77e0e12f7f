import setuptools

setuptools.setup(
  name = 'jlsenv',
  version = '0.1.0',
  description = 'Java runtime discovery and Lombok agent resolution for the '
                'Java language server',
  license = 'GPL-3.0-or-later',
  python_requires = '>=3.8',
  packages = setuptools.find_packages( include = [ 'jlsenv', 'jlsenv.*' ] ),
  package_data = { 'jlsenv': [ 'default_settings.json' ] },
  install_requires = [
    'bottle>=0.12',
    'regex',
    'semantic_version>=2.8',
  ],
  extras_require = {
    'test': [
      'flake8',
      'PyHamcrest>=2.0',
      'pytest',
      'requests',
      'WebTest',
    ],
  },
  entry_points = {
    'console_scripts': [ 'jlsenv = jlsenv.__main__:Main' ],
  },
)

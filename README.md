# pminstall

`pminstall` installs and removes plugins by running a list of install steps.
Each step is described by an XML element: `<download>`, `<copy>`, `<delete>`
or `<run>`. A `<setVariable>` element sets a variable instead of creating a
step. The steps download archives, unpack them, check files against an MD5
lookup service, copy files into place (with optional backups), delete files
or directories, and run installers.

Some steps cannot finish in the running process. For example, a file in use
cannot be overwritten. Such a step appends an element (`copy`, `delete` or
`run`) to a "for GPUP" XML document and reports `StepStatus.NEEDGPUP`. An
updater program can replay those actions later.

The package has no runtime dependencies beyond the standard library.

## Building blocks

- `pminstall.variables.VariableHandler` stores named values and expands
  `$NAME$` references in strings. Unknown names expand to an empty string.
- `pminstall.factory.InstallStepFactory` turns XML elements into step objects.
  Its `create(element)` returns `None` for elements that describe no step. It
  raises `ValueError` when a `copy`, `run` or `setVariable` element lacks a
  required attribute.
- `pminstall.copy_step.CopyStep`, `pminstall.delete_step.DeleteStep`,
  `pminstall.run_step.RunStep` and `pminstall.download_step.DownloadStep` are
  the steps. Each has a `perform(...)` method that returns a
  `pminstall.steps.StepStatus` (`SUCCESS`, `NEEDGPUP` or `FAIL`).
- `pminstall.plugin.Plugin` holds a plugin's metadata, its known and bad
  versions, and its install and remove steps. It runs the steps with
  `install(...)` and `remove(...)`, each returning a
  `pminstall.plugin.InstallStatus`. It also builds texts for display with
  `full_description()` and `update_description()`.
- `pminstall.steps.CancelToken` signals that a running install should stop.
- `pminstall.steps.Host` asks the user yes/no questions through its `ask`
  callable and shows notices through its `notify` callable. Without `ask`,
  every question is answered no. Without `notify`, notices go to stderr.

## Example

```python
import xml.etree.ElementTree as ET

from pminstall.factory import InstallStepFactory
from pminstall.plugin import Plugin
from pminstall.steps import CancelToken, Host
from pminstall.variables import VariableHandler

variables = VariableHandler()
variables.set_variable("PLUGINDIR", "/opt/editor/plugins")

factory = InstallStepFactory(variables)
plugin = Plugin("Example", filename="Example.dll")

step = factory.create(ET.fromstring(
    '<copy from="Example.dll" to="$PLUGINDIR$" replace="true"/>'
))
plugin.add_install_step(step)

for_gpup = ET.Element("install")
status = plugin.install(
    "/tmp/plugin-download/",
    for_gpup,
    print,                 # status messages
    lambda percent: None,  # progress of the current step
    lambda: None,          # called after each step
    Host(),
    variables,
    CancelToken(),
)
print(status)
```

`status` is `InstallStatus.SUCCESS`, `InstallStatus.FAIL`, or
`InstallStatus.NEEDRESTART` when some actions were deferred into `for_gpup`.

## Other utilities

- `pminstall.hashing.md5_file(path)` returns a file's MD5 digest as lower-case
  hex.
- `pminstall.decompress.unzip(zip_file, dest_dir)` extracts an archive. It
  returns `False` if the archive is unreadable or empty, if an entry would land
  outside `dest_dir`, or if an output file cannot be written.
- `pminstall.validate.validate(base_url, file, cancel_token)` appends the
  file's MD5 to `base_url`, fetches that URL, and returns a
  `ValidateStatus` (`OK`, `UNKNOWN` or `BANNED`). Any other reply, and any
  failure, counts as `UNKNOWN`.
- `pminstall.download.DownloadManager` fetches URLs into memory (`get_url`) or
  onto disk (`get_url_to_file`), with progress reporting and cancellation.
- `pminstall.linksearch.DirectLinkSearch` finds an `href="http(s)://..."` link
  ending in a given file name inside a saved HTML page.

## What it does not do

`pminstall` is a library only. It has no command-line program and no user
interface. It does not fetch or parse a list of available plugins, and it does
not detect which plugins are installed. It includes no updater program to
replay the deferred actions recorded in the "for GPUP" document. Writing that
document out and acting on it is up to the caller.
# kscan

`kscan` is a toolkit for working with Kubernetes security posture
frameworks (such as `nsa`, `mitre` and `armobest`) and their controls. It
loads frameworks, controls, exceptions and control inputs from local JSON
files or from a remote backend over HTTPS. It also keeps tenant
configuration in `~/.kubescape/config.json` or in a cluster config map, and
checks whether a newer release exists. A small command line reads and writes
the local configuration file.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Installing the package adds the `kscan` command.

```
kscan version
```

`version` first warns that the build number is unknown. It then asks the
release service whether a newer release exists and prints any warning or
message the service returns. A failed check is ignored. Last, it prints
`Your current version is: ` followed by the build number. Set
`KUBESCAPE_SKIP_UPDATE_CHECK=true` (or `1`, `t`) to skip the release check.
The command then prints `Skipping version check` in its place.

```
kscan config local set clusterName=my-cluster
kscan config local get clusterName
```

These commands read and write keys of `~/.kubescape/config.json`:

- `set` takes exactly one `<key>=<value>` argument. It prints
  `Value added successfully.` and rewrites the file as compact JSON with
  sorted keys.
- `get` takes exactly one key and prints `<key>=<value>`.
- Both commands need the file to exist already. A missing file, a missing
  key or a malformed argument prints `Error: ...` to standard error and exits
  with code 1.

The hidden `--environment` option selects the backend connector:

- leave it out for the production hosts;
- pass `dev` for the development hosts;
- pass three comma-separated host names (report receiver, backend, frontend)
  for a custom deployment:

```
kscan --environment report.example.com,api.example.com,portal.example.com version
```

Any other value is rejected with an error and exit code 1.

## Library use

Load policies from downloaded JSON files (`kscan.policies.LoadPolicy`):

```python
from kscan.policies import LoadPolicy

getter = LoadPolicy(["/path/to/nsa.json"])
framework = getter.get_framework("nsa")
control = getter.get_control("C-0057")   # searched by name or control ID
```

The two getters behave as follows:

- `get_framework` goes through the files in order and stops at the first
  framework whose name matches, ignoring case.
- `get_control` reads the first file. If that file is not the requested
  control, it looks the control up among the controls of the framework in
  the files.
- A name that does not match raises `kscan.policies.PolicyNotFoundError`.

`get_exceptions` and `get_controls_inputs` read the first file as a list of
exception policies or as an account configuration.

Talk to the backend (`kscan.armoapi`):

```python
from kscan.armoapi import new_armo_api_prod

api = new_armo_api_prod()
api.set_customer_guid("00000000-0000-0000-0000-000000000000")
names = api.list_frameworks("00000000-0000-0000-0000-000000000000")
```

`ArmoAPI` offers `get_framework` (which also caches the framework in
`~/.kubescape/<name>.json`), `get_exceptions`, `get_customer_guid`,
`get_account_config`, `get_controls_inputs`, `list_frameworks` and
`list_custom_frameworks`. `get_control` always raises `PolicyNotFoundError`.
A non-2xx response raises `kscan.httputils.HttpRequestError`.

Other modules:

- `kscan.strutils`: `convert_string_to_labels("a=b;c=d")` returns
  `{"a": "b", "c": "d"}`, and `convert_labels_to_string` reverses it.
  `string_in_slice` returns an index or `-1`.
- `kscan.jsonutils.pretty_json`: two-space indented JSON bytes that end in a
  newline, with HTML-sensitive characters escaped.
- `kscan.display`: coloured progress, success, error and warning lines, a
  silent mode, and a terminal spinner.
- `kscan.versioncheck`: the release check used by `kscan version`.
- `kscan.tenantconfig`:
  - `ConfigObj`, plus `LocalConfig` and `ClusterConfig`, which register or
    look up a tenant with a backend and store the result.
  - Cluster storage goes through a `ConfigMapClient`. This is an abstract
    class you implement for your cluster access.
- `kscan.scaninfo`: `ScanInfo` holds the options of a scan. Its `init()`
  picks the getters and adds `.json` or `.xml` to output names for the
  `json` and `junit` formats.
- `kscan.session`: `OPASessionObj`, `RegoInputData` and `Environment`.
- `kscan.hostsensor`: `HostSensorDataEnvelope`, the `HostSensor` interface
  and a `HostSensorHandlerMock` that collects nothing.

## What this package does not do

- It does not scan. No command evaluates frameworks or controls against a
  cluster or manifest files, and the package holds no policy engine.
- It has no commands for downloading policies or submitting results.
  `config` only has the `local` subcommands shown above.
- It contains no Kubernetes client. Config maps are reached only through a
  `ConfigMapClient` that you supply.
- It does not deploy a host sensor on cluster nodes. `HostSensorHandlerMock`
  is the only `HostSensor` provided.
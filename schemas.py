# schemas.py
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr, StrictBool, StrictInt, StrictStr
from typing import Annotated, Optional, Any

from helpers.union_decoders import decode_port_list, decode_str_array, decode_str_int_array

# Single string (run in a shell) or array of strings (run without a shell)
StrArray = Annotated[list[str], BeforeValidator(decode_str_array)]

# Like StrArray, but a bare integer is allowed as well
StrIntArray = Annotated[list[str], BeforeValidator(decode_str_int_array)]

# Port numbers or "host:port" strings, numbers kept as their JSON text
PortList = Annotated[list[str], BeforeValidator(decode_port_list)]

DEFAULT_WAIT_FOR = "updateContentCommand"
DEFAULT_USER_ENV_PROBE = "loginInteractiveShell"
DEFAULT_OVERRIDE_COMMAND = True
DEFAULT_ON_AUTO_FORWARD = "notify"
DEFAULT_PORT_LABEL = "Application"

LIFECYCLE_COMMANDS = (
    "initializeCommand",
    "onCreateCommand",
    "updateContentCommand",
    "postCreateCommand",
    "postStartCommand",
    "postAttachCommand",
)


class WireModel(BaseModel):
    # Only wire keys are accepted, unknown keys from newer devcontainer.json versions are dropped
    model_config = ConfigDict(extra="ignore")


class PortAttribute(WireModel):
    onAutoForward: Optional[StrictStr] = Field(
        default=None,
        description="Action taken when the port is discovered for automatic forwarding (default notify)"
    )
    elevateIfNeeded: Optional[StrictBool] = Field(
        default=None,
        description="Prompt for elevation when a privileged local port is needed"
    )
    label: Optional[StrictStr] = Field(
        default=None,
        description="Label shown in the UI for this port (default Application)"
    )
    requireLocalPort: Optional[StrictBool] = Field(
        default=None,
        description="Show a modal dialog if the chosen local port isn't used for forwarding"
    )
    protocol: Optional[StrictStr] = Field(
        default=None,
        description="Protocol to use when forwarding this port"
    )


class HostRequirements(WireModel):
    cpus: Optional[StrictInt] = Field(default=None, description="Number of required CPUs")
    memory: Optional[StrictStr] = Field(
        default=None,
        description="Amount of required RAM, supports tb, gb, mb and kb units"
    )
    storage: Optional[StrictStr] = Field(
        default=None,
        description="Amount of required disk space, supports tb, gb, mb and kb units"
    )


class BuildOptions(WireModel):
    dockerfile: Optional[StrictStr] = Field(
        default=None,
        description="Dockerfile location, relative to the folder containing devcontainer.json"
    )
    context: Optional[StrictStr] = Field(
        default=None,
        description="Build context folder, relative to the folder containing devcontainer.json"
    )
    target: Optional[StrictStr] = Field(default=None, description="Target stage in a multi-stage build")
    args: Optional[dict[str, StrictStr]] = Field(default=None, description="Build arguments")
    cacheFrom: StrArray = Field(
        default_factory=list,
        description="Image(s) to consider as a cache"
    )


class ImageContainer(WireModel):
    image: Optional[StrictStr] = Field(default=None, description="Docker image used to create the container")


class NonComposeBase(WireModel):
    appPorts: StrIntArray = Field(
        default_factory=list,
        description="Application ports exposed by the container, a number or a docker port mapping string"
    )
    containerEnv: Optional[dict[str, StrictStr]] = Field(default=None, description="Container environment variables")
    containerUser: Optional[StrictStr] = Field(
        default=None,
        description="User the container is started with (default is the image user)"
    )
    mounts: Optional[list[StrictStr]] = Field(
        default=None,
        description="Mount points in docker --mount syntax"
    )
    runArgs: Optional[list[StrictStr]] = Field(default=None, description="Extra docker run arguments")
    workspaceMount: Optional[StrictStr] = Field(
        default=None,
        description="The --mount parameter used for the workspace folder"
    )


class ComposeContainer(WireModel):
    dockerComposeFile: StrArray = Field(
        default_factory=list,
        description="docker-compose file(s) used to start the services"
    )
    # Existing manifests carry the service under the key "string", not "service".
    # Probably an upstream naming mistake, kept so those manifests keep decoding.
    service: Optional[StrictStr] = Field(
        default=None,
        alias="string",
        description="Primary compose service the editor connects to"
    )
    runServices: Optional[list[StrictStr]] = Field(
        default=None,
        description="Services that should be started and stopped"
    )


class DockerfileContainer(WireModel):
    dockerFile: Optional[StrictStr] = Field(
        default=None,
        description="Dockerfile location, relative to the folder containing devcontainer.json"
    )
    context: Optional[StrictStr] = Field(
        default=None,
        description="Build context folder, relative to the folder containing devcontainer.json"
    )
    build: BuildOptions = Field(default_factory=BuildOptions, description="Docker build options")


class DevContainerConfig(ImageContainer, NonComposeBase, ComposeContainer, DockerfileContainer):
    """
    Parsed devcontainer.json.
    The image, Dockerfile and compose settings share the top level object,
    any subset of them may be present.
    """

    name: Optional[StrictStr] = Field(default=None, description="Name of the dev container")
    features: Optional[dict[str, Any]] = Field(default=None, description="Features to add to the dev container")
    overrideFeatureInstallOrder: Optional[list[StrictStr]] = Field(
        default=None,
        description="Feature ids in the order they should be installed"
    )
    forwardPorts: PortList = Field(
        default_factory=list,
        description="Ports to forward from the container to the local machine"
    )
    portsAttributes: Optional[dict[str, PortAttribute]] = Field(
        default=None,
        alias="portAttributes",
        description="Properties applied when a specific port is forwarded"
    )
    otherPortsAttributes: Optional[dict[str, PortAttribute]] = Field(
        default=None,
        description="Properties applied to ports without their own attributes"
    )
    updateRemoteUserUID: Optional[StrictBool] = Field(
        default=None,
        description="Update the container user's UID/GID to match the local user on Linux"
    )
    remoteEnv: Optional[dict[str, StrictStr]] = Field(
        default=None,
        description="Environment for processes spawned in the container"
    )
    remoteUser: Optional[StrictStr] = Field(
        default=None,
        description="User for processes spawned in the container"
    )

    initializeCommand: StrArray = Field(default_factory=list, description="Run locally before anything else")
    onCreateCommand: StrArray = Field(default_factory=list, description="Run when creating the container")
    updateContentCommand: StrArray = Field(
        default_factory=list,
        description="Run when creating the container and when workspace content was updated"
    )
    postCreateCommand: StrArray = Field(default_factory=list, description="Run after creating the container")
    postStartCommand: StrArray = Field(default_factory=list, description="Run after starting the container")
    postAttachCommand: StrArray = Field(default_factory=list, description="Run when attaching to the container")

    waitFor: Optional[StrictStr] = Field(
        default=None,
        description="Command to wait for before continuing in the background (default updateContentCommand)"
    )
    userEnvProbe: Optional[StrictStr] = Field(
        default=None,
        description="How the user environment is read (default loginInteractiveShell)"
    )
    hostRequirements: HostRequirements = Field(
        default_factory=HostRequirements,
        description="Host hardware requirements"
    )
    customizations: Optional[dict[str, Any]] = Field(
        default=None,
        description="Tool-specific configuration, one subproperty per tool"
    )
    shutdownAction: Optional[StrictStr] = Field(
        default=None,
        description="Action taken when the editor disconnects"
    )
    overrideCommand: Optional[StrictBool] = Field(
        default=None,
        description="Whether to overwrite the command specified in the image (default true)"
    )
    workspaceFolder: Optional[StrictStr] = Field(
        default=None,
        description="Path of the workspace folder inside the container"
    )

    # Deprecated, use customizations.vscode instead
    settings: Optional[dict[str, Any]] = Field(default=None, description="Deprecated VS Code settings")
    extensions: Optional[list[StrictStr]] = Field(default=None, description="Deprecated VS Code extensions")
    devPort: Optional[StrictInt] = Field(default=None, description="Deprecated VS Code backend port")

    # Where the config was loaded from, never part of the JSON
    _origin: Optional[str] = PrivateAttr(default=None)

    @property
    def origin(self) -> Optional[str]:
        return self._origin

    def lifecycle_commands(self) -> dict[str, list[str]]:
        """Non-empty lifecycle commands in execution order"""
        commands = {}
        for key in LIFECYCLE_COMMANDS:
            command = getattr(self, key)
            if command:
                commands[key] = command
        return commands

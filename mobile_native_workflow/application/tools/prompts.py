"""Prompt templates for the mobile native MCP tools.

Templates use str.format placeholders; literal braces are doubled.
"""

POST_TOOL_INVOCATION_INSTRUCTIONS = """

# Post-Tool-Invocation Instructions

## 1. Format the results from the execution of your task

The output of your task should conform to the following JSON schema:

```json
{result_schema}
```

A string representation of this JSON schema can also be found in the `resultSchema`
field of this tool's output.

## 2. Invoke the next tool to continue the workflow

You MUST initiate the following actions to proceed with the in-progress workflow you are
participating in.

### 2.1. Invoke the `{orchestrator_id}` tool

Invoke the `{orchestrator_id}` tool, with the following input schema:

{orchestrator_schema}

### 2.2 Provide input values to the tool

Provide the following input values to the `{orchestrator_id}` tool, associated
with the input schema from the last step:

- `{user_input_property}`: The structured results from the execution of your task, as specified in the first Post-Tool-Invocation step.
- `{workflow_state_property}`: {workflow_state_data}

This will continue the workflow orchestration process.
"""

ORCHESTRATION_PROMPT = """# Your Role

You are participating in a workflow orchestration process. The current (`{orchestrator_id}`) MCP server tool is the orchestrator, which is sending you instructions on what to do next. These instructions describe the next participating MCP server tool to invoke, along with its input schema and input values.

# Your Task

Invoke the following MCP server tool:

**MCP Server Tool Name**: {tool_name}

**MCP Server Tool Input Schema**:
```json
{input_schema}
```

**MCP Server Tool Input Values**:
```json
{input_values}
```

## Additional Input: `{workflow_state_property}`

`{workflow_state_property}` is an additional input parameter that is specified in the input schema above, and should be passed to the next MCP server tool invocation, with the following object value:

{workflow_state_data}

This represents opaque workflow state data that should be round-tripped back to the `{orchestrator_id}` MCP server tool orchestrator at the completion of the next MCP server tool invocation, without modification. These instructions will be further specified by the next MCP server tool invocation.
"""

WORKFLOW_CONCLUDED = "The workflow has concluded. No further workflow actions are forthcoming."

INPUT_EXTRACTION_PROMPT = """
# ROLE
You are a highly accurate and precise data extraction tool.

# TASK

Your task is to analyze a user utterance and extract values for a given list of properties.
For each property you are asked to find, you must provide its extracted value or `null`
if no value is found.

---
# CONTEXT

## USER UTTERANCE TO ANALYZE
{user_utterance}

## PROPERTIES TO EXTRACT
Here is the list of properties you need to find values for. Use each property's description
to understand what to look for.

```json
{properties}
```

---
# INSTRUCTIONS
1. Carefully read the "USER UTTERANCE TO ANALYZE".
2. For each property listed in "PROPERTIES TO EXTRACT", search the text for a
   corresponding value.
3. If a clear value is found for a property, place it in your output.
4. If a property's value is not mentioned in the text, you MUST use `null` as the
   value for that property.
5. Ensure the keys in your output JSON object exactly match the `propertyName` values
   from the input list.
6. The exact format of your output object will be given in the section below.
"""

GET_INPUT_PROMPT = """
# ROLE
You are an assistant collecting the remaining details needed to create a mobile app project.

# TASK
Ask the user for the values of the properties listed below, in a single friendly question.
Explain briefly what each value is used for, then WAIT for the user's answer.

# PROPERTIES REQUIRING INPUT
{properties}

# INSTRUCTIONS
1. Present one question covering every property above, using each property's friendly name.
2. Do not guess or invent values; only the user can provide them.
3. Once the user answers, report their answer verbatim as `userUtterance`, as described below.
"""

USER_INPUT_TRIAGE_PROMPT = """# User Input Triage for Mobile App Development

You are tasked with parsing user requirements and extracting structured project properties for Salesforce native mobile app development.

## Your Task

Analyze the following user input and extract relevant project properties:

**User Input:**
{user_input}

## Analysis Guidelines

Extract as much relevant information as possible from the user input:

1. **Core Properties**:
   - Extract platform, project name, package name, organization and login host
   - For project name and package name, use information from the app description
   - Generate a proper package identifier format (e.g., com.company.appname)

2. **Analysis Metadata**:
   - Provide a confidence level (0.0 to 1.0) in your extractions
   - List any missing information
   - Document assumptions made during extraction

Only report a property when the user supplied it or it follows directly from what they
said; leave it `null` otherwise. The workflow asks the user for anything still missing.

## Response Format

Your response must strictly follow the expected JSON schema format.
"""

TEMPLATE_SELECTION_PROMPT = """# Template Selection Guidance for {platform}

## Task: Select the Best Template

The following template options are available:

```json
{template_options}
```

Review the available templates and choose the template that best matches:
- **Platform compatibility**: {platform}
- **Feature requirements**: General mobile app needs
- **Use case alignment**: Record management, data display, CRUD operations
- **Complexity level**: Appropriate for the user's requirements

Each template includes:
- **path**: The template identifier to use as the selectedTemplate value
- **metadata**: Contains descriptive information about the template
"""

PROJECT_GENERATION_PROMPT = """# Mobile App Project Generation Guide

You MUST follow the steps in this guide in order. Do not execute any commands that are not part of the steps in this guide.

## Project Configuration
- **Template**: {selected_template}
- **Project Name**: {project_name}
- **Platform**: {platform}
- **Package Name**: {package_name}
- **Organization**: {organization}
- **Login Host**: {login_host}
- **Template Properties**: {template_properties}

## Step 1: Execute Platform-Specific CLI Command

Generate the project using the Salesforce Mobile SDK CLI:

```bash
sf mobilesdk {platform_lower} createwithtemplate {template_source_arg}--template="{selected_template}" --appname="{project_name}" --packagename="{package_name}" --organization="{organization}"
```

**Expected Outcome**: A new {platform} project directory named "{project_name}" will be created with the template structure. The output of the command will indicate the location of the OAuth configuration file; take note of it for the OAuth configuration step.

NOTE: use the above command EXACTLY to generate the project. If it fails, do not try to generate the project any other way. Report the error to the user instead.

## Step 2: Verify Project Structure

```bash
cd "{project_name}"
ls -la
```

**Expected Structure**: platform-specific files and directories appropriate for {platform} development.

## Step 3: Configure OAuth Settings

{oauth_step}

## Success Criteria

- Project generated successfully from template "{selected_template}"
- Project structure verified
- OAuth configuration completed with the provided credentials

Report the absolute path of the generated project directory as `projectPath`.
"""

IOS_OAUTH_STEP = """Edit the `bootconfig.plist` file of the generated project:

```xml
<key>remoteAccessConsumerKey</key>
<string>{client_id}</string>
<key>oauthRedirectURI</key>
<string>{callback_uri}</string>
<key>oauthScopes</key>
<array>
    <string>id</string>
    <string>web</string>
    <string>api</string>
</array>
<key>shouldAuthenticate</key>
<true/>
```

Add the callback URL scheme `{url_scheme}` to `CFBundleURLTypes` in `Info.plist`.{login_host_step}"""

IOS_LOGIN_HOST_STEP = """

Add the custom login host to `{project_name}/{project_name}/Info.plist`:

```xml
<key>SFDCOAuthLoginHost</key>
<string>{login_host}</string>
```"""

ANDROID_OAUTH_STEP = """Edit the `bootconfig.xml` file of the generated project:

```xml
<string name="remoteAccessConsumerKey">{client_id}</string>
<string name="oauthRedirectURI">{callback_uri}</string>{login_host_line}
```

Make sure `AndroidManifest.xml` declares an intent filter for the callback URL scheme `{url_scheme}`."""

BUILD_PROMPT = """# Salesforce Mobile App Build Guidance for {platform}

You MUST follow the steps in this guide in order. Do not execute any commands that are not part of the steps in this guide.

## Step 1: Verify the build environment

{environment_step}

## Step 2: Build the project

Navigate to `{project_path}` and run:

```bash
{build_command}
```

Write the complete output of the build command to a file, for example `{project_path}/build_output.txt`.

**Expected Outcome**: the output ends with "{success_marker}".

## Step 3: Report the result

- `buildSuccessful`: `true` if the build succeeded, `false` otherwise
- `buildOutputFilePath`: the absolute path of the file holding the build output
"""

IOS_BUILD_ENVIRONMENT = """```bash
xcodebuild -version
```

If Xcode command line tools are missing, install them with `xcode-select --install`.

Check that the deployment target is at least iOS {min_ios}:

```bash
xcodebuild -showBuildSettings | grep -A 1 'IPHONEOS_DEPLOYMENT_TARGET'
```

Check that simulators are available:

```bash
sf force lightning local device list -p ios
```"""

ANDROID_BUILD_ENVIRONMENT = """```bash
java -version
echo $ANDROID_HOME
```

Both must succeed: a JDK must be installed and ANDROID_HOME must point at the Android SDK.
Check that the Android Gradle plugin is declared in the project's build.gradle files."""

BUILD_RECOVERY_PROMPT = """You are a tech-adept agent acting on behalf of a user who is not familiar with the technical details of Mobile SDK development.
The build has failed (attempt #{attempt_number}). Your task is to analyze the build errors and attempt to fix them.

# Salesforce Mobile App Build Recovery for {platform}

### Step 1: Analyze Build Output
1. Read the build output file at "{build_output_file_path}"
2. Look for error messages and warnings that indicate the root cause

### Step 2: Identify Common Issues
{common_issues}

### Step 3: Apply Fixes
1. Based on the errors identified, apply the appropriate fixes in `{project_path}`
2. You have full access to inspect and modify project files
3. Common files to check/modify: {common_files}

### Step 4: Return Results
Return a result with:
- `fixesAttempted`: Array of strings describing what you fixed
- `readyForRetry`: `true` if you applied fixes and believe the build should be retried, `false` if you cannot identify a fix
"""

IOS_COMMON_BUILD_ISSUES = """- **Missing dependencies or pods** ("No such module", "framework not found"): run `pod install` in the project directory
- **Code signing** ("Code Signing", "Provisioning Profile"): for simulator builds select "Sign to Run Locally"
- **Swift/API compatibility**: update code to current APIs or fix Swift syntax errors
- **Missing files or resources** ("file not found"): verify files exist and are referenced in the project
- **Project configuration** (build settings, schemes): fix project build settings and paths"""

IOS_COMMON_BUILD_FILES = "Podfile, *.xcodeproj/project.pbxproj, source files (*.swift, *.m, *.h), Info.plist"

ANDROID_COMMON_BUILD_ISSUES = """- **Gradle dependencies** ("Could not resolve dependency"): update dependencies in build.gradle files
- **SDK/build tools version mismatch**: update compileSdkVersion, targetSdkVersion or buildToolsVersion
- **Kotlin/Java compilation errors**: fix syntax errors, missing imports or type mismatches
- **Manifest issues**: check and fix AndroidManifest.xml
- **Resource issues** ("Resource not found"): verify resources exist and are properly named"""

ANDROID_COMMON_BUILD_FILES = "build.gradle (project and app level), AndroidManifest.xml, gradle.properties, source files (*.kt, *.java), res/"

COMPLETION_PROMPT = """# ROLE
You are reporting the successful end of a mobile app workflow.

# TASK
Tell the user that their {platform} app was generated, built and launched.

# CONTEXT
- Project location: {project_path}

# INSTRUCTIONS
1. Summarize what was created and where it lives.
2. Suggest next steps: opening the project in its IDE and running it again on a device.
"""

FAILURE_PROMPT = """# ROLE
You are reporting the end of a mobile app workflow that could not be completed.

# TASK
Explain to the user why the workflow failed and what they can do about it.

# CONTEXT
The workflow stopped with the following messages:

{messages}

# INSTRUCTIONS
1. These failures are not recoverable within the current workflow.
2. Describe each failure in plain language.
3. Advise the user on how to fix the underlying problems before starting a new workflow.
"""

DEPLOYMENT_PROMPT = """# Mobile Native App Deployment Guidance for {platform}

You MUST follow the steps in this guide in order. Do not execute any commands that are not part of the steps in this guide.

## Step 1: {device_step_title}

{device_step}

## Step 2: Install the App

{install_step}

## Next Steps

{launch_step}
"""

IOS_DEVICE_STEP = """Make sure the simulator `{target_device}` exists and is running:

```bash
xcrun simctl list devices | grep "{target_device}"
xcrun simctl boot {target_device}
```

"Unable to boot device in current state: Booted" means the simulator is already running."""

ANDROID_DEVICE_STEP = """List the available emulators:

```bash
sf force lightning local device list -p android
```

If none exists, create one:

```bash
sf force lightning local device create -p android -n pixel-<api-level> -d pixel -l <api-level>
```

Start the emulator:

```bash
sf force lightning local device start -p android -t <emulator-name>
```"""

IOS_INSTALL_STEP = """Install the built app on the simulator:

```bash
xcrun simctl install {target_device} <your-app>.app
```

The `.app` bundle is in the build products directory of `{project_path}`."""

ANDROID_INSTALL_STEP = """From `{project_path}`, install the {build_type} build on the running emulator:

```bash
./gradlew install{variant}
```"""

IOS_LAUNCH_STEP = """Launch the app:

```bash
xcrun simctl launch {target_device} <app-bundle-id>
```"""

ANDROID_LAUNCH_STEP = """Launch the app:

```bash
adb shell monkey -p <application-id> -c android.intent.category.LAUNCHER 1
```"""

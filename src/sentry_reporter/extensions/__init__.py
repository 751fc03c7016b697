from sentry_reporter.extensions import (
    base,
    callback,
    client_ip,
    environment,
    exception,
    request,
    root_path,
    sniffer,
)

Extension = base.Extension
CallableExtension = callback.CallableExtension
ClientIPDetector = client_ip.ClientIPDetector
EnvironmentReporter = environment.EnvironmentReporter
ExceptionReporter = exception.ExceptionReporter
RequestReporter = request.RequestReporter
RootPathRemover = root_path.RootPathRemover
ClientSniffer = sniffer.ClientSniffer

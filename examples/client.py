#!/usr/bin/env python3
""" Call a remote UserService: one call that waits for its reply, and one
    fire-and-forget call. The broker is taken from PORTHOS_AMQP_URL.
"""

import sys

import porthos


def main():

    porthos.log.configure()

    broker = porthos.create_broker()
    client = porthos.create_client(broker, 'UserService', 5)

    # Call the remote method and print the response when it's available.

    future = client.call('doSomethingThatReturnsValue').with_args(20).invoke()

    try:
        response = future.result()
    except porthos.CallError as error:
        print('Error:', error)
    else:
        print('Response: %s (status %s)' % (response.text, response.status_code))

    # Call a void method.

    client.call('doSomething').with_args(20).void()

    client.close()
    broker.close()


if __name__ == '__main__':
    try:
        main()
    except porthos.transport.TransportError as error:
        sys.stderr.write(str(error) + '\n')
        sys.exit(1)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

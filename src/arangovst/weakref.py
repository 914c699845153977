
import weakref


class Gone(Exception):
    """ Raised by :func:`call` when the referent no longer exists.
    """



def ref(thing):
    """ Return a weak reference to the supplied argument, regardless of
        whether it is a simple object or a bound method. A plain
        :func:`weakref.ref` to a bound method dies immediately, since the
        bound method object itself is transient; :class:`weakref.WeakMethod`
        tracks the instance instead.
    """

    try:
        thing.__func__
        thing.__self__
    except AttributeError:
        return weakref.ref(thing)
    else:
        return weakref.WeakMethod(thing)



def call(reference, *args, **kwargs):
    """ Dereference *reference* and invoke the result with the supplied
        arguments. Raises :class:`Gone` if the referent has been collected.
    """

    target = reference()

    if target is None:
        raise Gone('weakly referenced callable is gone')

    return target(*args, **kwargs)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

"""
coursecart: course catalog browser with a persistent, shared course cart.
"""

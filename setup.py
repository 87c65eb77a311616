from os import path
from re import match, S
from setuptools import setup

with open(path.join('mw_bot_client', '__init__.py'), 'r') as f:
    contents = f.read()
    longdesc = match('^"""(.*?)"""', contents, S).group(1)
    version = match(r'[\s\S]*__version__[^\'"]+[\'"]([^\'"]+)[\'"]', contents).group(1)
    del contents

setup(
    name="mw-bot-client",
    version=version,
    description="A MediaWiki API client for bots.",
    long_description=longdesc,
    long_description_content_type='text/x-rst',
    license="MIT",
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Wiki',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
    ],
    keywords='mediawiki api bot requests',
    packages=["mw_bot_client", "mw_bot_client.tests"],
    install_requires=['requests', 'beautifulsoup4', 'lxml'],
    extras_require={'test': ['pytest']},
    python_requires='>=3.7',
)
